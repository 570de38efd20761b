"""
Unit tests for the foreign-key dependency graph

Tests the NetworkX-based ordering used by ordered syncs and by bootstrap
reference validation.
"""

import pytest

from tablesync.dependency_graph import EntityDependencyGraph, order_by_dependencies
from tablesync.exceptions import (
    CircularDependencyError,
    EntityDefinitionError,
    MissingDependencyError,
)
from tablesync.models import EntityBuilder
from tests.utils import course_entity, student_entity


def _entity(name, *references):
    builder = EntityBuilder(name).field("Id", int, primary_key=True)
    for reference in references:
        builder.field(f"{reference}Id", int, references=(reference, "Id"))
    return builder.build()


class TestDependencyGraphBasics:
    """Test basic graph operations"""

    def test_create_empty_graph(self):
        graph = EntityDependencyGraph()

        assert len(graph.entities) == 0
        assert len(graph.graph.nodes) == 0

    def test_duplicate_entity_raises_error(self):
        graph = EntityDependencyGraph([course_entity()])

        with pytest.raises(EntityDefinitionError, match="already exists"):
            graph.add_entity(course_entity())

    def test_dependencies_and_dependents(self):
        graph = EntityDependencyGraph([course_entity(), student_entity()])

        assert graph.get_dependencies("Student") == ["Course"]
        assert graph.get_dependents("Course") == ["Student"]
        assert graph.get_dependencies("Unknown") == []

    def test_edges_added_when_referenced_entity_arrives_later(self):
        graph = EntityDependencyGraph([student_entity()])
        assert graph.get_dependencies("Student") == []

        graph.add_entity(course_entity())

        assert graph.get_dependencies("Student") == ["Course"]
        assert graph.dangling == []

    def test_self_reference_ignored(self):
        employee = (
            EntityBuilder("Employee")
            .field("Id", int, primary_key=True)
            .field("ManagerId", int, nullable=True, references=("Employee", "Id"))
            .build()
        )
        graph = EntityDependencyGraph([employee])

        assert graph.detect_cycles() == []
        assert graph.topological_order() == [employee]


class TestTopologicalOrder:
    """Test dependency ordering"""

    def test_referenced_entities_first(self):
        ordered = order_by_dependencies([student_entity(), course_entity()])

        assert [e.name for e in ordered] == ["Course", "Student"]

    def test_independent_entities_keep_input_order(self):
        entities = [_entity("Zebra"), _entity("Apple"), _entity("Mango")]

        assert [e.name for e in order_by_dependencies(entities)] == ["Zebra", "Apple", "Mango"]

    def test_chain(self):
        entities = [_entity("C", "B"), _entity("B", "A"), _entity("A")]

        assert [e.name for e in order_by_dependencies(entities)] == ["A", "B", "C"]

    def test_cycle_raises(self):
        graph = EntityDependencyGraph([_entity("A", "B"), _entity("B", "A")])

        assert len(graph.detect_cycles()) == 1
        with pytest.raises(CircularDependencyError, match="Circular dependencies") as exc_info:
            graph.topological_order()
        assert sorted(exc_info.value.cycles[0]) == ["A", "B"]


class TestValidateDependencies:
    """Test references outside the entity set"""

    def test_no_warnings_when_complete(self):
        graph = EntityDependencyGraph([course_entity(), student_entity()])

        assert graph.validate_dependencies() == []

    def test_dangling_reference_warns(self):
        warnings = EntityDependencyGraph([student_entity()]).validate_dependencies()

        assert len(warnings) == 1
        assert "Course.Id" in warnings[0]

    def test_dangling_reference_strict(self):
        graph = EntityDependencyGraph([student_entity()])

        with pytest.raises(MissingDependencyError) as exc_info:
            graph.validate_dependencies(strict=True)

        assert exc_info.value.object_name == "Student"
        assert exc_info.value.missing_dependency == "Course"
