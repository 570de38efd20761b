"""
Exceptions for schema derivation and synchronization
"""

from typing import Any


class TableSyncError(Exception):
    """Base exception for tablesync errors"""


class UnsupportedFieldType(TableSyncError):
    """Raised when a field's semantic type has no SQL column type"""

    def __init__(self, semantic_type: Any, field_name: str | None = None):
        self.semantic_type = semantic_type
        self.field_name = field_name
        type_name = getattr(semantic_type, "__name__", repr(semantic_type))
        if field_name:
            message = f"Type {type_name} of field '{field_name}' is not supported"
        else:
            message = f"Type {type_name} is not supported"
        super().__init__(message)


class StatementExecutionFailure(TableSyncError):
    """Raised when the database rejects a statement or query

    The driver's own message is kept verbatim; the original exception is
    chained as ``__cause__``.
    """

    def __init__(self, statement: str, message: str):
        self.statement = statement
        self.message = message
        super().__init__(f"{message}\nStatement: {statement}")


class EntityDefinitionError(TableSyncError):
    """Raised for malformed entity descriptors or entity lookups"""


class ConfigurationError(TableSyncError):
    """Raised when project configuration cannot be loaded"""


class DependencyValidationError(TableSyncError):
    """Raised when foreign-key dependency validation fails"""


class CircularDependencyError(DependencyValidationError):
    """Raised when foreign keys form a cycle between entities"""

    def __init__(self, cycles: list[list[str]]):
        self.cycles = cycles
        cycle_strs = []
        for cycle in cycles:
            cycle_str = " → ".join(cycle + cycle[:1])
            cycle_strs.append(cycle_str)

        message = "Circular dependencies detected:\n" + "\n".join(
            f"  • {cycle_str}" for cycle_str in cycle_strs
        )
        super().__init__(message)


class MissingDependencyError(DependencyValidationError):
    """Raised when an entity references a table outside the entity set"""

    def __init__(self, object_name: str, missing_dependency: str):
        self.object_name = object_name
        self.missing_dependency = missing_dependency
        super().__init__(
            f"Entity '{object_name}' references non-existent entity '{missing_dependency}'"
        )


class DatabaseConnectionError(TableSyncError):
    """Raised when a connection to the database cannot be opened"""
