"""
Create Command Implementation

Bootstraps every table of an entity set: previews the CREATE TABLE and
constraint statements, confirms, then executes them in two phases.
"""

from rich.console import Console
from rich.prompt import Confirm

from tablesync.bootstrap import BootstrapReport, create_tables
from tablesync.context import SchemaContext
from tablesync.exceptions import TableSyncError
from tablesync.gateway import DryRunGateway
from tablesync.models import EntityDescriptor

from ._preview import print_sql_statements_preview

console = Console()


class CreateError(TableSyncError):
    """Raised when the create command fails"""


def create_all_tables(
    context: SchemaContext | None,
    entities: list[EntityDescriptor],
    dry_run: bool = False,
    no_interaction: bool = False,
) -> BootstrapReport:
    """Create the tables of ``entities``

    Args:
        context: Schema context for the target database (unused for dry runs)
        entities: Entities to create, in any order
        dry_run: Show the statements without connecting to the database
        no_interaction: Skip the confirmation prompt

    Returns:
        BootstrapReport (statements planned, for a dry run or a declined prompt)

    Raises:
        CreateError: If the bootstrap fails
    """
    try:
        # Planning needs no database: bootstrap issues no reads.
        planned = create_tables(DryRunGateway(), entities)
        for warning in planned.warnings:
            console.print(f"[yellow]⚠ {warning}[/yellow]")

        print_sql_statements_preview(
            planned.statements,
            title="Create Preview",
            action_prompt=None if dry_run else f"Execute {len(planned.statements)} statements?",
        )
        if dry_run:
            console.print("[yellow]Dry run: nothing executed[/yellow]")
            return planned
        if not no_interaction and not Confirm.ask("Proceed?", default=False):
            console.print("[yellow]Create cancelled[/yellow]")
            return planned

        if context is None:
            raise CreateError("No database configured")
        report = context.create_tables(entities)
    except CreateError:
        raise
    except TableSyncError as err:
        console.print("\n[red]✗ Create failed[/red]")
        raise CreateError(str(err)) from err

    console.print(
        f"[green]✓[/green] Created {len(report.tables)} tables "
        f"and {len(report.constraint_statements)} constraints"
    )
    return report
