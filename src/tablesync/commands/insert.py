"""
Insert Command Implementation

Inserts one record given as ``key=value`` pairs. Values are converted to the
field's semantic type; fields left out are sent as NULL.
"""

from datetime import datetime
from typing import Any

from rich.console import Console

from tablesync.context import SchemaContext
from tablesync.exceptions import TableSyncError
from tablesync.models import EntityDescriptor, SemanticType

console = Console()

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


class InsertError(TableSyncError):
    """Raised when the insert command fails"""


def convert_value(semantic_type: SemanticType, raw: str) -> Any:
    """Convert a command-line string to the Python value for ``semantic_type``

    Raises:
        InsertError: If the string does not parse as that type
    """
    try:
        if semantic_type is SemanticType.INT:
            return int(raw)
        if semantic_type is SemanticType.BOOL:
            lowered = raw.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(f"expected one of {sorted(_TRUE | _FALSE)}")
        if semantic_type is SemanticType.DATETIME:
            return datetime.fromisoformat(raw)
    except ValueError as err:
        raise InsertError(f"Invalid {semantic_type} value '{raw}': {err}") from err
    return raw


def parse_values(entity: EntityDescriptor, pairs: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``key=value`` pairs into a record for ``entity``"""
    record: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep:
            raise InsertError(f"Invalid value '{pair}', expected key=value")
        current = entity.field(name)
        if current is None:
            available = ", ".join(entity.field_names)
            raise InsertError(f"Entity '{entity.name}' has no field '{name}'. Fields: {available}")
        record[name] = convert_value(current.semantic_type, raw)
    return record


def insert_record(
    context: SchemaContext, entity: EntityDescriptor, pairs: tuple[str, ...]
) -> dict[str, Any]:
    """Insert one record into ``entity``'s table

    Returns:
        The record as inserted

    Raises:
        InsertError: If a value is invalid or the database rejects the row
    """
    record = parse_values(entity, pairs)
    try:
        context.add_record(entity, record)
    except TableSyncError as err:
        raise InsertError(f"Failed to insert into '{entity.name}': {err}") from err

    console.print(f"[green]✓[/green] Inserted 1 row into {entity.name}")
    return record
