"""
Live Schema Inspector

Reads a table's current structure from INFORMATION_SCHEMA. Every read is a
single parameterised query; a query that returns no rows means the object
does not exist yet. Nothing is cached: each call goes to the database.
"""

import logging

from pydantic import BaseModel, Field

from .gateway import DatabaseGateway

logger = logging.getLogger(__name__)

COLUMNS_QUERY = (
    "SELECT COLUMN_NAME FROM INFORMATION_SCHEMA.COLUMNS "
    "WHERE TABLE_NAME = :table_name"
)

PRIMARY_KEY_QUERY = (
    "SELECT tc.CONSTRAINT_NAME FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS tc "
    "WHERE tc.TABLE_NAME = :table_name AND tc.CONSTRAINT_TYPE = 'PRIMARY KEY'"
)

FOREIGN_KEYS_QUERY = (
    "SELECT tc.CONSTRAINT_NAME FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS tc "
    "WHERE tc.TABLE_NAME = :table_name AND tc.CONSTRAINT_TYPE = 'FOREIGN KEY' "
    "ORDER BY tc.CONSTRAINT_NAME"
)

COLUMN_CONSTRAINTS_QUERY = (
    "SELECT ccu.COLUMN_NAME, tc.CONSTRAINT_NAME "
    "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS tc "
    "INNER JOIN INFORMATION_SCHEMA.CONSTRAINT_COLUMN_USAGE AS ccu "
    "ON tc.CONSTRAINT_SCHEMA = ccu.CONSTRAINT_SCHEMA "
    "AND tc.CONSTRAINT_NAME = ccu.CONSTRAINT_NAME "
    "WHERE tc.TABLE_NAME = :table_name AND tc.CONSTRAINT_TYPE IN ('UNIQUE', 'CHECK') "
    "ORDER BY ccu.COLUMN_NAME, tc.CONSTRAINT_NAME"
)

# Foreign keys of other tables that reference this table's primary key, with
# the columns needed to re-create them.
INBOUND_FOREIGN_KEYS_QUERY = (
    "SELECT fk.TABLE_NAME, fk.CONSTRAINT_NAME, fkc.COLUMN_NAME, pkc.COLUMN_NAME "
    "FROM INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS AS rc "
    "INNER JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS fk "
    "ON rc.CONSTRAINT_SCHEMA = fk.CONSTRAINT_SCHEMA AND rc.CONSTRAINT_NAME = fk.CONSTRAINT_NAME "
    "INNER JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS AS pk "
    "ON rc.UNIQUE_CONSTRAINT_SCHEMA = pk.CONSTRAINT_SCHEMA "
    "AND rc.UNIQUE_CONSTRAINT_NAME = pk.CONSTRAINT_NAME "
    "INNER JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS fkc "
    "ON fk.CONSTRAINT_SCHEMA = fkc.CONSTRAINT_SCHEMA AND fk.CONSTRAINT_NAME = fkc.CONSTRAINT_NAME "
    "INNER JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE AS pkc "
    "ON pk.CONSTRAINT_SCHEMA = pkc.CONSTRAINT_SCHEMA AND pk.CONSTRAINT_NAME = pkc.CONSTRAINT_NAME "
    "AND pkc.ORDINAL_POSITION = fkc.ORDINAL_POSITION "
    "WHERE pk.TABLE_NAME = :table_name AND pk.CONSTRAINT_TYPE = 'PRIMARY KEY' "
    "AND fk.TABLE_NAME <> :table_name "
    "ORDER BY fk.TABLE_NAME, fk.CONSTRAINT_NAME"
)


class InboundForeignKey(BaseModel):
    """A foreign key on another table that references this table's primary key"""

    table: str
    constraint_name: str
    column: str
    reference_column: str


class LiveTableSchema(BaseModel):
    """Snapshot of one table's live structure"""

    table: str
    columns: set[str] = Field(default_factory=set)
    primary_key: str | None = None
    foreign_keys: list[str] = Field(default_factory=list)  # table-wide, not per column
    column_constraints: dict[str, list[str]] = Field(default_factory=dict)  # UNIQUE and CHECK
    inbound_foreign_keys: list[InboundForeignKey] = Field(default_factory=list)

    @property
    def exists(self) -> bool:
        return bool(self.columns)


class LiveSchemaInspector:
    """Query the live schema of tables through a database gateway"""

    def __init__(self, gateway: DatabaseGateway) -> None:
        self.gateway = gateway

    def columns_of(self, table: str) -> set[str]:
        rows = self.gateway.query(COLUMNS_QUERY, {"table_name": table})
        return {row[0] for row in rows}

    def primary_key_constraint_name_of(self, table: str) -> str | None:
        rows = self.gateway.query(PRIMARY_KEY_QUERY, {"table_name": table})
        return rows[0][0] if rows else None

    def foreign_key_constraint_names_of(self, table: str) -> list[str]:
        """All foreign key constraint names owned by the table, whatever column they bind"""
        rows = self.gateway.query(FOREIGN_KEYS_QUERY, {"table_name": table})
        return [row[0] for row in rows]

    def column_constraint_names_of(self, table: str) -> dict[str, list[str]]:
        """UNIQUE and CHECK constraint names, grouped by the column they bind"""
        rows = self.gateway.query(COLUMN_CONSTRAINTS_QUERY, {"table_name": table})
        constraints: dict[str, list[str]] = {}
        for column, constraint_name in rows:
            names = constraints.setdefault(column, [])
            if constraint_name not in names:
                names.append(constraint_name)
        return constraints

    def inbound_foreign_keys_of(self, table: str) -> list[InboundForeignKey]:
        """Foreign keys of other tables that reference the table's primary key"""
        rows = self.gateway.query(INBOUND_FOREIGN_KEYS_QUERY, {"table_name": table})
        return [
            InboundForeignKey(
                table=row[0], constraint_name=row[1], column=row[2], reference_column=row[3]
            )
            for row in rows
        ]

    def snapshot(self, table: str) -> LiveTableSchema:
        """Read everything the synchronizer needs about a table"""
        schema = LiveTableSchema(
            table=table,
            columns=self.columns_of(table),
            primary_key=self.primary_key_constraint_name_of(table),
            foreign_keys=self.foreign_key_constraint_names_of(table),
            column_constraints=self.column_constraint_names_of(table),
            inbound_foreign_keys=self.inbound_foreign_keys_of(table),
        )
        logger.debug(
            "Live schema of %s: %d columns, primary key %s, %d foreign keys",
            table,
            len(schema.columns),
            schema.primary_key or "none",
            len(schema.foreign_keys),
        )
        return schema
