"""
Unit tests for SchemaContext
"""

import pytest

from tablesync.context import SchemaContext
from tablesync.exceptions import StatementExecutionFailure
from tests.utils import school_entities


class TestSchemaContext:
    def test_requires_url_or_factory(self):
        with pytest.raises(ValueError, match="database URL"):
            SchemaContext()

    def test_each_call_opens_and_releases_a_connection(self, schema_context, server):
        schema_context.create_tables(school_entities())
        schema_context.sync_tables(school_entities())

        assert server.connections_opened == 2
        assert server.connections_closed == 2

    def test_connection_released_on_failure(self, schema_context, server):
        with pytest.raises(StatementExecutionFailure):
            schema_context.sync_tables(school_entities())

        assert server.connections_closed == server.connections_opened == 1

    def test_plan_sync_does_not_apply(self, schema_context, server):
        schema_context.create_tables(school_entities())
        before = server.describe()
        executed = len(server.executed)

        plan = schema_context.plan_sync(school_entities())

        assert plan.total_statements > 0
        assert server.describe() == before
        assert len(server.executed) == executed

    def test_add_record_and_inspect(self, schema_context, server, course):
        schema_context.create_tables(school_entities())

        schema_context.add_record(course, {"Id": 101, "Title": "Algebra"})
        live = schema_context.inspect("Course")

        assert server.tables["Course"].rows == [{"Id": 101, "Title": "Algebra"}]
        assert live.columns == {"Id", "Title"}
        assert live.inbound_foreign_keys[0].table == "Student"
