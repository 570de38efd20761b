"""
Unit tests for key=value record parsing in the insert command
"""

from datetime import datetime

import pytest

from tablesync.commands.insert import InsertError, convert_value, parse_values
from tablesync.models import EntityBuilder, SemanticType


@pytest.fixture
def event():
    return (
        EntityBuilder("Event")
        .field("Id", int, primary_key=True)
        .field("Title", str)
        .field("Public", bool)
        .field("StartsAt", datetime, nullable=True)
        .build()
    )


class TestConvertValue:
    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("No", False)])
    def test_bool(self, raw, expected):
        assert convert_value(SemanticType.BOOL, raw) is expected

    def test_int(self):
        assert convert_value(SemanticType.INT, "42") == 42

    def test_datetime(self):
        assert convert_value(SemanticType.DATETIME, "2024-09-01T08:30:00") == datetime(
            2024, 9, 1, 8, 30
        )

    def test_string_unchanged(self):
        assert convert_value(SemanticType.STRING, "a=b") == "a=b"

    @pytest.mark.parametrize(
        "semantic_type,raw",
        [
            (SemanticType.INT, "forty"),
            (SemanticType.BOOL, "maybe"),
            (SemanticType.DATETIME, "soon"),
        ],
    )
    def test_invalid_values(self, semantic_type, raw):
        with pytest.raises(InsertError, match=f"Invalid {semantic_type} value"):
            convert_value(semantic_type, raw)


class TestParseValues:
    def test_parses_pairs(self, event):
        record = parse_values(event, ("Id=1", "Title=Launch=Day", "Public=true"))

        assert record == {"Id": 1, "Title": "Launch=Day", "Public": True}

    def test_missing_separator(self, event):
        with pytest.raises(InsertError, match="expected key=value"):
            parse_values(event, ("Id",))

    def test_unknown_field(self, event):
        with pytest.raises(InsertError, match="has no field 'Venue'"):
            parse_values(event, ("Venue=Hall",))
