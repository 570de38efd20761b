"""
DDL Generator

Stateless builders for the T-SQL statements used by bootstrap, sync and
record insertion. Constraint names are deterministic functions of the table,
column and referenced table so that repeated runs produce identical names.
"""

import re

from .models import EntityDescriptor, FieldDescriptor, ForeignKeyRef
from .sql_types import column_type

_REGULAR_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Return a T-SQL identifier, bracket-delimited only when it needs to be

    Regular identifiers (``Student``, ``Course_Id``) are returned unchanged;
    anything else is wrapped in brackets with ``]`` doubled.
    """
    if _REGULAR_IDENTIFIER.match(name):
        return name
    return "[" + name.replace("]", "]]") + "]"


# ====================
# CONSTRAINT NAMES
# ====================


def primary_key_constraint_name(table: str) -> str:
    return f"PK_{table}"


def foreign_key_constraint_name(table: str, reference_table: str) -> str:
    """Name of a foreign key constraint

    The column is not part of the name: two foreign keys from one table to
    the same referenced table share a name.
    """
    return f"FK_{table}_{reference_table}"


def unique_constraint_name(table: str, column: str) -> str:
    return f"UQ_{table}_{column}"


def check_constraint_name(table: str, column: str) -> str:
    return f"CK_{table}_{column}"


# ====================
# TABLES AND COLUMNS
# ====================


def _nullability(field: FieldDescriptor) -> str:
    return "NULL" if field.nullable else "NOT NULL"


def column_definition(field: FieldDescriptor) -> str:
    """Inline column definition used by CREATE TABLE"""
    parts = [quote_identifier(field.name), column_type(field)]
    if field.primary_key:
        parts.append("PRIMARY KEY")
    if field.unique:
        parts.append("UNIQUE")
    if not field.nullable:
        parts.append("NOT NULL")
    return " ".join(parts)


def create_table(entity: EntityDescriptor) -> str:
    """CREATE TABLE with inline PRIMARY KEY / UNIQUE / NOT NULL modifiers

    Foreign keys are not emitted inline; bootstrap adds them once every
    table exists.
    """
    columns = ", ".join(column_definition(field) for field in entity.fields)
    return f"CREATE TABLE {quote_identifier(entity.name)} ({columns})"


def add_column(table: str, field: FieldDescriptor) -> str:
    return (
        f"ALTER TABLE {quote_identifier(table)} ADD {quote_identifier(field.name)} "
        f"{column_type(field)} {_nullability(field)}"
    )


def alter_column(table: str, field: FieldDescriptor) -> str:
    return (
        f"ALTER TABLE {quote_identifier(table)} ALTER COLUMN {quote_identifier(field.name)} "
        f"{column_type(field)} {_nullability(field)}"
    )


# ====================
# CONSTRAINTS
# ====================


def drop_constraint(table: str, constraint_name: str) -> str:
    return (
        f"ALTER TABLE {quote_identifier(table)} "
        f"DROP CONSTRAINT {quote_identifier(constraint_name)}"
    )


def primary_key_constraint(table: str, column: str, constraint_name: str | None = None) -> str:
    name = constraint_name or primary_key_constraint_name(table)
    return (
        f"ALTER TABLE {quote_identifier(table)} ADD CONSTRAINT {quote_identifier(name)} "
        f"PRIMARY KEY ({quote_identifier(column)})"
    )


def foreign_key_constraint(
    table: str, column: str, ref: ForeignKeyRef, constraint_name: str | None = None
) -> str:
    name = constraint_name or foreign_key_constraint_name(table, ref.reference_table)
    return (
        f"ALTER TABLE {quote_identifier(table)} ADD CONSTRAINT {quote_identifier(name)} "
        f"FOREIGN KEY ({quote_identifier(column)}) "
        f"REFERENCES {quote_identifier(ref.reference_table)}"
        f"({quote_identifier(ref.reference_column)})"
    )


def unique_constraint(table: str, column: str) -> str:
    name = unique_constraint_name(table, column)
    return (
        f"ALTER TABLE {quote_identifier(table)} ADD CONSTRAINT {quote_identifier(name)} "
        f"UNIQUE ({quote_identifier(column)})"
    )


def check_constraint(table: str, column: str, expression: str) -> str:
    name = check_constraint_name(table, column)
    return (
        f"ALTER TABLE {quote_identifier(table)} ADD CONSTRAINT {quote_identifier(name)} "
        f"CHECK ({expression})"
    )


# ====================
# RECORDS
# ====================


def bind_parameter_name(position: int) -> str:
    """Bind parameter name for the column at ``position`` in an INSERT

    Positional for every field, so a field literally named ``p1`` cannot
    collide with the parameter of another column.
    """
    return f"p{position}"


def insert_record(entity: EntityDescriptor) -> str:
    """Parameterised INSERT covering every field of the entity"""
    columns = ", ".join(quote_identifier(field.name) for field in entity.fields)
    values = ", ".join(f":{bind_parameter_name(i)}" for i in range(len(entity.fields)))
    return f"INSERT INTO {quote_identifier(entity.name)} ({columns}) VALUES ({values})"
