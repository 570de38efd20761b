"""
Inspect Command Implementation

Shows a table's live structure as read from INFORMATION_SCHEMA, and how it
compares with the matching entity when one is registered.
"""

from rich.console import Console
from rich.table import Table

from tablesync.context import SchemaContext
from tablesync.exceptions import TableSyncError
from tablesync.inspector import LiveTableSchema
from tablesync.models import EntityDescriptor

console = Console()


class InspectError(TableSyncError):
    """Raised when the inspect command fails"""


def inspect_table(
    context: SchemaContext, table: str, entity: EntityDescriptor | None = None
) -> LiveTableSchema:
    """Print the live schema of ``table``

    Args:
        context: Schema context for the target database
        table: Table name
        entity: Matching entity, if registered; adds a "Declared" column

    Raises:
        InspectError: If the schema cannot be read
    """
    try:
        live = context.inspect(table)
    except TableSyncError as err:
        raise InspectError(f"Failed to inspect '{table}': {err}") from err

    if not live.exists:
        console.print(f"[yellow]Table '{table}' does not exist[/yellow]")
        return live

    declared = set(entity.field_names) if entity is not None else None

    grid = Table(title=f"Live schema: {table}")
    grid.add_column("Column", style="cyan")
    grid.add_column("Constraints")
    if declared is not None:
        grid.add_column("Declared")

    for column in sorted(live.columns):
        constraints = ", ".join(live.column_constraints.get(column, []))
        row = [column, constraints]
        if declared is not None:
            row.append("[green]yes[/green]" if column in declared else "[yellow]no[/yellow]")
        grid.add_row(*row)

    console.print(grid)
    console.print(f"Primary key: {live.primary_key or '(none)'}")
    console.print(f"Foreign keys: {', '.join(live.foreign_keys) or '(none)'}")

    if declared is not None:
        missing = [name for name in entity.field_names if name not in live.columns]
        if missing:
            console.print(f"[yellow]Missing columns (sync will add): {', '.join(missing)}[/yellow]")

    return live
