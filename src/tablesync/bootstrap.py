"""
Bulk Bootstrap

First-time creation of every table of an entity set. Runs in two phases:
every CREATE TABLE first, then every foreign key (and check) constraint, so a
foreign key may target a table that appears later in the input.
"""

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from . import ddl
from .dependency_graph import EntityDependencyGraph
from .gateway import DatabaseGateway
from .models import EntityDescriptor

logger = logging.getLogger(__name__)


class BootstrapReport(BaseModel):
    """Statements executed by a bootstrap, per phase"""

    tables: list[str] = Field(default_factory=list)
    create_statements: list[str] = Field(default_factory=list)
    constraint_statements: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def statements(self) -> list[str]:
        return self.create_statements + self.constraint_statements


def build_create_statements(entities: Iterable[EntityDescriptor]) -> dict[str, str]:
    """CREATE TABLE statement per table name, in input order"""
    statements: dict[str, str] = {}
    for entity in entities:
        statements[entity.name] = ddl.create_table(entity)
    return statements


def build_constraint_statements(entities: Iterable[EntityDescriptor]) -> list[str]:
    """Constraints that need every table to exist: foreign keys, then checks"""
    statements: list[str] = []
    entities = list(entities)
    for entity in entities:
        for current in entity.foreign_keys:
            assert current.foreign_key is not None
            statements.append(
                ddl.foreign_key_constraint(entity.name, current.name, current.foreign_key)
            )
    for entity in entities:
        for current in entity.fields:
            if current.check:
                statements.append(ddl.check_constraint(entity.name, current.name, current.check))
    return statements


def create_tables(
    gateway: DatabaseGateway, entities: Iterable[EntityDescriptor]
) -> BootstrapReport:
    """Create every table, then add the constraints between them

    All statements are generated before any is executed, so a malformed
    entity aborts the bootstrap before the database is touched.

    Raises:
        UnsupportedFieldType: If a field has no column type
        StatementExecutionFailure: If the database rejects a statement
    """
    entities = list(entities)
    report = BootstrapReport()

    report.warnings = EntityDependencyGraph(entities).validate_dependencies()
    for warning in report.warnings:
        logger.warning("%s; assuming the table already exists", warning)

    create_statements = build_create_statements(entities)
    constraint_statements = build_constraint_statements(entities)

    for table, statement in create_statements.items():
        logger.info("Creating table %s", table)
        gateway.execute(statement)
        report.tables.append(table)
        report.create_statements.append(statement)

    for statement in constraint_statements:
        gateway.execute(statement)
        report.constraint_statements.append(statement)

    logger.info(
        "Created %d tables and %d constraints",
        len(report.create_statements),
        len(report.constraint_statements),
    )
    return report
