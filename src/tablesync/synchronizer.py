"""
Schema Synchronizer

Reconciles live tables with entity descriptors. Each entity gets one
compare-then-reconcile pass:

1. Read the live schema of its table (columns, primary key, foreign keys,
   unique/check constraints bound to columns).
2. For every field: add the column if it is missing; otherwise drop the
   constraints that would block an ALTER COLUMN (every foreign key of the
   table, foreign keys of other tables that reference its primary key, the
   primary key itself, unique/check constraints on the column), alter the
   column, then put the primary key back on the key column and the inbound
   foreign keys back on their tables.
3. Reapply the field's foreign key and unique constraints. A foreign key to
   the table itself waits until the column it references has been processed
   and the primary key is back.
4. Once every field is done, reapply the check constraints. A check can
   span several columns, so it is only re-created after all of them have
   been altered or added.

This is a reconciling synchronizer, not a minimal diff: existing columns are
always altered and their constraints always dropped and re-created. Running it
again converges to the same end state. Statements are not batched or wrapped
in a transaction; a failure aborts the current entity and leaves earlier
statements applied.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from . import ddl
from .dependency_graph import order_by_dependencies
from .gateway import DatabaseGateway
from .inspector import LiveSchemaInspector, LiveTableSchema
from .models import EntityDescriptor, FieldDescriptor, ForeignKeyRef

logger = logging.getLogger(__name__)


class TableSyncReport(BaseModel):
    """What one entity pass did to its table"""

    table: str
    added_columns: list[str] = Field(default_factory=list)
    altered_columns: list[str] = Field(default_factory=list)
    dropped_constraints: list[str] = Field(default_factory=list)
    statements: list[str] = Field(default_factory=list)


class SyncReport(BaseModel):
    """Result of a sync over a set of entities"""

    tables: list[TableSyncReport] = Field(default_factory=list)

    @property
    def statements(self) -> list[str]:
        return [statement for table in self.tables for statement in table.statements]

    @property
    def total_statements(self) -> int:
        return sum(len(table.statements) for table in self.tables)


@dataclass
class _EntityPass:
    """Working state of one entity pass

    ``live`` is the snapshot read at the start of the pass; ``dropped``
    records constraints already dropped so none is dropped twice.
    """

    entity: EntityDescriptor
    live: LiveTableSchema
    report: TableSyncReport
    dropped: set[str] = field(default_factory=set)
    foreign_keys_dropped: bool = False
    inbound_dropped: bool = False
    primary_key_restored: bool = False
    processed: set[str] = field(default_factory=set)
    deferred_foreign_keys: list[FieldDescriptor] = field(default_factory=list)

    @property
    def table(self) -> str:
        return self.entity.name

    @property
    def primary_key_dropped(self) -> bool:
        return self.live.primary_key is not None and self.live.primary_key in self.dropped


class SchemaSynchronizer:
    """Bring live tables in line with entity descriptors

    Attributes:
        gateway: Database gateway used for both reads and writes
        inspector: Live schema reader over the same gateway
    """

    def __init__(self, gateway: DatabaseGateway) -> None:
        self.gateway = gateway
        self.inspector = LiveSchemaInspector(gateway)

    def sync_tables(
        self, entities: Iterable[EntityDescriptor], ordered: bool = False
    ) -> SyncReport:
        """Run one reconciliation pass per entity

        Args:
            entities: Entities to reconcile, processed in the given order
            ordered: Sort entities so referenced tables are reconciled first

        Returns:
            SyncReport with the statements executed per table

        Raises:
            StatementExecutionFailure: If the database rejects a statement
            CircularDependencyError: If ``ordered`` and foreign keys form a cycle
        """
        entities = list(entities)
        if ordered:
            entities = order_by_dependencies(entities)

        report = SyncReport()
        for entity in entities:
            report.tables.append(self.sync_entity(entity))
        return report

    def sync_entity(self, entity: EntityDescriptor) -> TableSyncReport:
        """Reconcile one table with its entity"""
        live = self.inspector.snapshot(entity.name)
        state = _EntityPass(entity=entity, live=live, report=TableSyncReport(table=entity.name))
        logger.info("Synchronizing %s (%d fields)", entity.name, len(entity.fields))

        for current in entity.fields:
            if current.name in live.columns:
                self._drop_constraints_for_alter(state, current)
                self._run(state, ddl.alter_column(state.table, current))
                state.report.altered_columns.append(current.name)
            else:
                self._run(state, ddl.add_column(state.table, current))
                state.report.added_columns.append(current.name)

            self._restore_primary_key(state, current)
            self._reapply_constraints(state, current)
            state.processed.add(current.name)
            self._reapply_deferred_foreign_keys(state)

        # The key column may have been processed before another column's
        # alter dropped the primary key.
        key_field = entity.key_field
        if key_field is not None and state.primary_key_dropped and not state.primary_key_restored:
            self._restore_primary_key(state, key_field)
            self._reapply_deferred_foreign_keys(state)
        for current in entity.fields:
            if current.check:
                self._run(state, ddl.check_constraint(state.table, current.name, current.check))
        if state.inbound_dropped and not state.primary_key_restored:
            logger.warning(
                "Primary key of %s was not restored; foreign keys referencing it were left dropped",
                entity.name,
            )
        if state.deferred_foreign_keys:
            logger.warning(
                "Primary key of %s was not restored; foreign keys %s to the table itself "
                "were not re-created",
                entity.name,
                ", ".join(f.name for f in state.deferred_foreign_keys),
            )

        logger.info(
            "Synchronized %s: %d added, %d altered, %d statements",
            entity.name,
            len(state.report.added_columns),
            len(state.report.altered_columns),
            len(state.report.statements),
        )
        return state.report

    # ====================
    # CONSTRAINT LIFECYCLE
    # ====================

    def _drop_foreign_keys(self, state: _EntityPass) -> None:
        """Drop every foreign key of the table, whichever column it binds"""
        if state.foreign_keys_dropped:
            return
        for name in state.live.foreign_keys:
            self._drop(state, name)
        state.foreign_keys_dropped = True

    def _drop_inbound_foreign_keys(self, state: _EntityPass) -> None:
        """Drop foreign keys of other tables that reference the primary key"""
        if state.inbound_dropped:
            return
        for inbound in state.live.inbound_foreign_keys:
            self._run(state, ddl.drop_constraint(inbound.table, inbound.constraint_name))
            state.report.dropped_constraints.append(inbound.constraint_name)
        state.inbound_dropped = True

    def _restore_inbound_foreign_keys(self, state: _EntityPass) -> None:
        if not state.inbound_dropped:
            return
        for inbound in state.live.inbound_foreign_keys:
            reference = ForeignKeyRef(
                reference_table=state.table, reference_column=inbound.reference_column
            )
            self._run(
                state,
                ddl.foreign_key_constraint(
                    inbound.table, inbound.column, reference, inbound.constraint_name
                ),
            )
        state.inbound_dropped = False

    def _drop_constraints_for_alter(self, state: _EntityPass, current: FieldDescriptor) -> None:
        self._drop_foreign_keys(state)
        if state.live.primary_key is not None and not state.primary_key_dropped:
            self._drop_inbound_foreign_keys(state)
            self._drop(state, state.live.primary_key)
        for name in state.live.column_constraints.get(current.name, []):
            self._drop(state, name)

    def _restore_primary_key(self, state: _EntityPass, current: FieldDescriptor) -> None:
        """Put the primary key back on the key column

        A primary key that existed keeps its live name. A table without one
        gets ``PK_{table}`` when the key field is marked primary key.
        """
        key_field = state.entity.key_field
        if key_field is None or current.name != key_field.name or state.primary_key_restored:
            return

        if state.live.primary_key is not None:
            if not state.primary_key_dropped:
                return
            name = state.live.primary_key
        elif current.primary_key:
            name = ddl.primary_key_constraint_name(state.table)
        else:
            return

        self._run(state, ddl.primary_key_constraint(state.table, current.name, name))
        state.primary_key_restored = True
        self._restore_inbound_foreign_keys(state)

    def _reapply_constraints(self, state: _EntityPass, current: FieldDescriptor) -> None:
        """Re-issue the field's foreign key and unique constraints"""
        reference = current.foreign_key
        if reference is not None:
            name = ddl.foreign_key_constraint_name(state.table, reference.reference_table)
            if name in state.live.foreign_keys:
                self._drop_foreign_keys(state)
            if self._must_wait_for_key(state, reference):
                state.deferred_foreign_keys.append(current)
            else:
                self._add_foreign_key(state, current)

        if current.unique:
            self._run(state, ddl.unique_constraint(state.table, current.name))

    def _must_wait_for_key(self, state: _EntityPass, reference: ForeignKeyRef) -> bool:
        """Whether a foreign key to the table itself would find no key to reference yet"""
        if reference.reference_table != state.table:
            return False
        if state.primary_key_dropped and not state.primary_key_restored:
            return True
        return (
            reference.reference_column in state.entity.field_names
            and reference.reference_column not in state.processed
        )

    def _reapply_deferred_foreign_keys(self, state: _EntityPass) -> None:
        waiting = []
        for current in state.deferred_foreign_keys:
            assert current.foreign_key is not None
            if self._must_wait_for_key(state, current.foreign_key):
                waiting.append(current)
            else:
                self._add_foreign_key(state, current)
        state.deferred_foreign_keys = waiting

    def _add_foreign_key(self, state: _EntityPass, current: FieldDescriptor) -> None:
        assert current.foreign_key is not None
        self._run(state, ddl.foreign_key_constraint(state.table, current.name, current.foreign_key))

    # ====================
    # EXECUTION
    # ====================

    def _drop(self, state: _EntityPass, constraint_name: str) -> None:
        if constraint_name in state.dropped:
            return
        self._run(state, ddl.drop_constraint(state.table, constraint_name))
        state.dropped.add(constraint_name)
        state.report.dropped_constraints.append(constraint_name)

    def _run(self, state: _EntityPass, statement: str) -> None:
        self.gateway.execute(statement)
        state.report.statements.append(statement)


def sync_tables(
    gateway: DatabaseGateway, entities: Iterable[EntityDescriptor], ordered: bool = False
) -> SyncReport:
    """Reconcile the tables of ``entities`` through ``gateway``"""
    return SchemaSynchronizer(gateway).sync_tables(entities, ordered=ordered)
