"""
Click-based CLI for tablesync.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .commands import (
    create_all_tables,
    insert_record,
    inspect_table,
    plan_sync,
    sync_all_tables,
)
from .config import DEFAULT_ENVIRONMENT, ProjectConfig, load_config, resolve_database_url
from .context import SchemaContext
from .exceptions import ConfigurationError, TableSyncError
from .models import EntityDescriptor
from .registry import EntityRegistry, load_entities

console = Console()


class CliSettings:
    """Options shared by every command, resolved on first use"""

    def __init__(
        self,
        config_path: Path | None,
        environment: str,
        url: str | None,
        entities_target: str | None,
    ) -> None:
        self.config_path = config_path
        self.environment = environment
        self.url = url
        self.entities_target = entities_target
        self._config: ProjectConfig | None = None
        self._registry: EntityRegistry | None = None

    @property
    def config(self) -> ProjectConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def registry(self) -> EntityRegistry:
        if self._registry is None:
            target = self.entities_target or self.config.entities
            if not target:
                raise ConfigurationError(
                    "No entities configured. Pass --entities module:attribute "
                    "or set \"entities\" in tablesync.json."
                )
            self._registry = load_entities(target)
        return self._registry

    def entities(self) -> list[EntityDescriptor]:
        return self.registry.get_all()

    def ordered(self, flag: bool) -> bool:
        return flag or self.config.ordered

    def schema_context(self) -> SchemaContext:
        url = resolve_database_url(self.config, self.environment, self.url)
        echo = self.config.get_environment(self.environment).echo
        return SchemaContext(url, echo=echo)


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("tablesync")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))


def _fail(err: Exception) -> None:
    console.print(f"[red]✗ Error:[/red] {escape(str(err))}", highlight=False)
    sys.exit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="tablesync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Config file (default: ./tablesync.json)",
)
@click.option(
    "--env",
    "-e",
    "environment",
    default=DEFAULT_ENVIRONMENT,
    show_default=True,
    help="Environment from the config file",
)
@click.option("--url", help="Database URL (overrides config and TABLESYNC_DATABASE_URL)")
@click.option("--entities", "entities_target", help="Entity set as module:attribute")
@click.option("--verbose", is_flag=True, help="Log every statement")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    environment: str,
    url: str | None,
    entities_target: str | None,
    verbose: bool,
) -> None:
    """tablesync: derive and synchronize SQL Server tables from entity descriptors"""
    _configure_logging(verbose)
    ctx.obj = CliSettings(config_path, environment, url, entities_target)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show the statements without connecting")
@click.option("--yes", "-y", "no_interaction", is_flag=True, help="Skip confirmation")
@click.pass_obj
def create(settings: CliSettings, dry_run: bool, no_interaction: bool) -> None:
    """Create every table, then the foreign keys between them"""

    try:
        entities = settings.entities()
        context = None if dry_run else settings.schema_context()
        create_all_tables(context, entities, dry_run=dry_run, no_interaction=no_interaction)
    except TableSyncError as e:
        _fail(e)


@cli.command()
@click.option("--ordered", is_flag=True, help="Reconcile referenced tables first")
@click.option("--yes", "-y", "no_interaction", is_flag=True, help="Skip confirmation")
@click.pass_obj
def sync(settings: CliSettings, ordered: bool, no_interaction: bool) -> None:
    """Reconcile live tables with the entities"""

    try:
        sync_all_tables(
            settings.schema_context(),
            settings.entities(),
            ordered=settings.ordered(ordered),
            no_interaction=no_interaction,
        )
    except TableSyncError as e:
        _fail(e)


@cli.command()
@click.option("--ordered", is_flag=True, help="Reconcile referenced tables first")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path (default: stdout)",
)
@click.pass_obj
def plan(settings: CliSettings, ordered: bool, output: Path | None) -> None:
    """Show the statements a sync would execute"""

    try:
        plan_sync(
            settings.schema_context(),
            settings.entities(),
            ordered=settings.ordered(ordered),
            output=output,
        )
    except TableSyncError as e:
        _fail(e)


@cli.command()
@click.argument("table")
@click.pass_obj
def inspect(settings: CliSettings, table: str) -> None:
    """Show the live schema of TABLE"""

    try:
        entity = None
        if settings.entities_target or settings.config.entities:
            entity = settings.registry.get(table)
        inspect_table(settings.schema_context(), table, entity)
    except TableSyncError as e:
        _fail(e)


@cli.command()
@click.argument("entity_name")
@click.option("--value", "-v", "values", multiple=True, help="Field value as key=value")
@click.pass_obj
def insert(settings: CliSettings, entity_name: str, values: tuple[str, ...]) -> None:
    """Insert one record into ENTITY_NAME's table"""

    try:
        entity = settings.registry.require(entity_name)
        insert_record(settings.schema_context(), entity, values)
    except TableSyncError as e:
        _fail(e)


if __name__ == "__main__":
    cli()
