"""
Sync Command Implementation

Reconciles live tables with the entity descriptors. The plan is computed
against the live schema without applying it, previewed, confirmed, and then
executed on a fresh connection.
"""

from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm
from rich.syntax import Syntax

from tablesync.context import SchemaContext
from tablesync.exceptions import TableSyncError
from tablesync.models import EntityDescriptor
from tablesync.synchronizer import SyncReport

from ._preview import print_sql_statements_preview

console = Console()


class SyncError(TableSyncError):
    """Raised when the sync command fails"""


def _print_summary(report: SyncReport) -> None:
    for table in report.tables:
        console.print(
            f"  [cyan]{table.table}[/cyan]: "
            f"{len(table.added_columns)} added, "
            f"{len(table.altered_columns)} altered, "
            f"{len(table.dropped_constraints)} constraints re-created"
        )


def plan_sync(
    context: SchemaContext,
    entities: list[EntityDescriptor],
    ordered: bool = False,
    output: Path | None = None,
) -> SyncReport:
    """Show (or save) the statements a sync would execute

    Args:
        context: Schema context for the target database
        entities: Entities to reconcile
        ordered: Sort by foreign-key dependencies first
        output: Optional file to write the SQL to

    Raises:
        SyncError: If the live schema cannot be read
    """
    try:
        report = context.plan_sync(entities, ordered=ordered)
    except TableSyncError as err:
        raise SyncError(f"Failed to plan sync: {err}") from err

    sql = ";\n\n".join(report.statements)
    if sql:
        sql += ";\n"

    if output:
        output.write_text(sql, encoding="utf-8")
        console.print(f"[green]✓[/green] SQL written to {output}")
        console.print(f"  Statements: {report.total_statements}")
    elif sql:
        console.print(Syntax(sql, "sql", theme="monokai", line_numbers=False))
    else:
        console.print("[dim](no statements)[/dim]")

    return report


def sync_all_tables(
    context: SchemaContext,
    entities: list[EntityDescriptor],
    ordered: bool = False,
    no_interaction: bool = False,
) -> SyncReport:
    """Plan, confirm and run a sync

    Args:
        context: Schema context for the target database
        entities: Entities to reconcile
        ordered: Sort by foreign-key dependencies first
        no_interaction: Skip the confirmation prompt

    Returns:
        The executed SyncReport, or the plan if the prompt was declined

    Raises:
        SyncError: If planning or execution fails
    """
    try:
        plan = context.plan_sync(entities, ordered=ordered)
    except TableSyncError as err:
        raise SyncError(f"Failed to plan sync: {err}") from err

    print_sql_statements_preview(
        plan.statements,
        title="Sync Preview",
        action_prompt=f"Execute {plan.total_statements} statements?",
    )
    if not no_interaction and not Confirm.ask("Proceed?", default=False):
        console.print("[yellow]Sync cancelled[/yellow]")
        return plan

    try:
        report = context.sync_tables(entities, ordered=ordered)
    except TableSyncError as err:
        console.print("\n[red]✗ Sync failed[/red]")
        console.print("[yellow]Statements before the failure remain applied.[/yellow]")
        raise SyncError(str(err)) from err

    console.print(
        f"[green]✓[/green] Synchronized {len(report.tables)} tables "
        f"({report.total_statements} statements)"
    )
    _print_summary(report)
    return report
