"""Shared test helpers."""

from tests.utils.entity_builders import (
    SCHOOL_ENTITIES,
    course_entity,
    school_entities,
    student_entity,
)
from tests.utils.fake_gateway import FakeGateway, FakeSqlServer

__all__ = [
    "SCHOOL_ENTITIES",
    "course_entity",
    "student_entity",
    "school_entities",
    "FakeGateway",
    "FakeSqlServer",
]
