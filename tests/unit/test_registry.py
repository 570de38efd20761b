"""
Unit tests for the entity registry and module:attribute loading
"""

import pytest

from tablesync.exceptions import EntityDefinitionError
from tablesync.registry import EntityRegistry, load_entities
from tests.utils import course_entity, student_entity


class TestEntityRegistry:
    def test_register_and_get(self):
        registry = EntityRegistry([course_entity(), student_entity()])

        assert registry.get("Course").name == "Course"
        assert registry.get("Missing") is None
        assert registry.get_all_names() == ["Course", "Student"]
        assert "Student" in registry
        assert len(registry) == 2

    def test_duplicate_raises(self):
        registry = EntityRegistry([course_entity()])

        with pytest.raises(EntityDefinitionError, match="already registered"):
            registry.register(course_entity())

    def test_require_lists_available(self):
        registry = EntityRegistry([course_entity()])

        with pytest.raises(EntityDefinitionError, match="Available entities: Course"):
            registry.require("Classroom")


class TestLoadEntities:
    def test_sequence_attribute(self):
        registry = load_entities("tests.utils.entity_builders:SCHOOL_ENTITIES")

        assert registry.get_all_names() == ["Course", "Student"]

    def test_callable_attribute(self):
        registry = load_entities("tests.utils.entity_builders:school_entities")

        assert registry.get_all_names() == ["Course", "Student"]

    def test_single_descriptor_factory(self):
        registry = load_entities("tests.utils.entity_builders:course_entity")

        assert registry.get_all_names() == ["Course"]

    @pytest.mark.parametrize(
        "target,message",
        [
            ("tests.utils.entity_builders", "expected 'module:attribute'"),
            ("tests.utils.no_such_module:ENTITIES", "Cannot import module"),
            ("tests.utils.entity_builders:MISSING", "has no attribute"),
            ("tests.utils.entity_builders:__doc__", "expected an EntityRegistry"),
        ],
    )
    def test_invalid_targets(self, target, message):
        with pytest.raises(EntityDefinitionError, match=message):
            load_entities(target)
