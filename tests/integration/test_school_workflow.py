"""
End-to-end workflow through SchemaContext: bootstrap, evolve the model,
synchronize twice and insert records, all against one in-memory database.
"""

import pytest

from tablesync import EntityBuilder, SchemaContext, StatementExecutionFailure
from tests.utils import FakeSqlServer, course_entity, school_entities, student_entity

pytestmark = pytest.mark.integration


@pytest.fixture
def context_and_server():
    server = FakeSqlServer()
    return SchemaContext(connect=server.connect), server


def test_bootstrap_evolve_and_insert(context_and_server):
    context, server = context_and_server

    bootstrap = context.create_tables(school_entities())
    assert len(bootstrap.create_statements) == 2
    assert len(bootstrap.constraint_statements) == 1

    context.add_record(course_entity(), {"Id": 101, "Title": "Algebra"})
    context.add_record(
        student_entity(), {"Id": 1, "Email": 7, "Name": "John", "CourseId": 101}
    )

    # New nullable column on a table that already holds rows
    evolved = [course_entity(), student_entity(with_age=True)]
    first = context.sync_tables(evolved)
    assert first.tables[1].added_columns == ["Age"]

    snapshot = server.describe()
    second = context.sync_tables(evolved)
    assert second.tables[1].added_columns == []
    assert server.describe() == snapshot

    # Existing rows survive and the new column reads as NULL
    assert server.tables["Student"].rows[0]["Age"] is None
    context.add_record(
        evolved[1], {"Id": 2, "Email": 8, "Name": "Ann", "CourseId": 101, "Age": 19}
    )
    assert len(server.tables["Student"].rows) == 2


def test_check_constraint_enforced_after_sync(context_and_server):
    context, server = context_and_server
    context.create_tables(school_entities())

    context.sync_tables([course_entity(), student_entity(with_age=True)])

    assert server.constraints["CK_Student_Age"].expression == "Age >= 0"


def test_required_column_cannot_be_added_to_populated_table(context_and_server):
    context, server = context_and_server
    context.create_tables([course_entity()])
    context.add_record(course_entity(), {"Id": 101, "Title": "Algebra"})
    with_code = (
        EntityBuilder("Course")
        .field("Id", int, primary_key=True)
        .field("Title", str)
        .field("Code", str)
        .build()
    )

    with pytest.raises(StatementExecutionFailure, match="can contain nulls"):
        context.sync_tables([with_code])

    # The pass stopped at the failing statement; the key was already restored
    assert server.primary_key_of("Course") is not None
    assert "Code" not in server.tables["Course"].columns


def test_plan_then_sync_match(context_and_server):
    context, _ = context_and_server
    context.create_tables(school_entities())

    plan = context.plan_sync(school_entities(), ordered=True)
    report = context.sync_tables(school_entities(), ordered=True)

    assert plan.statements == report.statements
