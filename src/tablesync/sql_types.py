"""SQL Server column types for semantic field types."""

from typing import Any

from .models import FieldDescriptor, SemanticType, coerce_semantic_type

# Unbounded text cannot back an index, so strings taking part in a primary
# key or unique constraint are capped at 255 characters.
CONSTRAINED_STRING_TYPE = "NVARCHAR(255)"
UNCONSTRAINED_STRING_TYPE = "NVARCHAR(MAX)"

_FIXED_TYPES: dict[SemanticType, str] = {
    SemanticType.INT: "INT",
    SemanticType.DATETIME: "DATETIME",
    SemanticType.BOOL: "BIT",
}


def map_sql_type(semantic_type: Any, constrained: bool) -> str:
    """Map a semantic type to a column type token

    Args:
        semantic_type: SemanticType (or its value / Python type)
        constrained: Whether the column is part of a primary key or unique constraint

    Returns:
        Column type token, e.g. ``INT`` or ``NVARCHAR(255)``

    Raises:
        UnsupportedFieldType: For types outside Int, String, DateTime, Bool
    """
    resolved = coerce_semantic_type(semantic_type)
    if resolved is SemanticType.STRING:
        return CONSTRAINED_STRING_TYPE if constrained else UNCONSTRAINED_STRING_TYPE
    return _FIXED_TYPES[resolved]


def column_type(field: FieldDescriptor) -> str:
    """Column type token for a field"""
    return map_sql_type(field.semantic_type, field.is_constrained)
