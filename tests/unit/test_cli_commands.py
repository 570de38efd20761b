"""CLI routing and command-surface tests."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tablesync.cli import cli
from tablesync.config import DATABASE_URL_ENV
from tablesync.context import SchemaContext

ENTITIES = "tests.utils.entity_builders:SCHOOL_ENTITIES"
URL = "mssql+pyodbc://school"


@pytest.fixture
def connect_to(monkeypatch, server):
    """Route every CLI connection to the in-memory database; returns the URLs used"""
    urls: list[str] = []

    def _context(url, echo=False):
        urls.append(url)
        return SchemaContext(connect=server.connect)

    monkeypatch.setattr("tablesync.cli.SchemaContext", _context)
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
    return urls


def _invoke(*args: str, input: str | None = None):
    return CliRunner().invoke(cli, list(args), input=input, catch_exceptions=False)


def test_version() -> None:
    result = _invoke("--version")

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_create_dry_run_needs_no_database(monkeypatch) -> None:
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)

    result = _invoke("--entities", ENTITIES, "create", "--dry-run")

    assert result.exit_code == 0
    assert "CREATE TABLE Course" in result.output
    assert "FK_Student_Course" in result.output
    assert "Dry run" in result.output


def test_create_executes_after_confirmation(connect_to, server) -> None:
    result = _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")

    assert result.exit_code == 0
    assert set(server.tables) == {"Course", "Student"}
    assert connect_to == [URL]
    assert "Created 2 tables" in result.output


def test_create_cancelled(connect_to, server) -> None:
    result = _invoke("--url", URL, "--entities", ENTITIES, "create", input="n\n")

    assert result.exit_code == 0
    assert "Create cancelled" in result.output
    assert server.tables == {}


def test_create_without_entities_fails(connect_to) -> None:
    result = _invoke("--url", URL, "create", "--yes")

    assert result.exit_code == 1
    assert "No entities configured" in result.output


def test_sync_executes(connect_to, server) -> None:
    _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")

    result = _invoke("--url", URL, "--entities", ENTITIES, "sync", "--yes")

    assert result.exit_code == 0
    assert "Synchronized 2 tables" in result.output
    assert server.constraint_names("Student", "UNIQUE") == ["UQ_Student_Email"]


def test_sync_cancelled_leaves_schema(connect_to, server) -> None:
    _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")
    before = server.describe()

    result = _invoke("--url", URL, "--entities", ENTITIES, "sync", input="n\n")

    assert result.exit_code == 0
    assert "Sync cancelled" in result.output
    assert server.describe() == before


def test_sync_failure_exits_with_error(connect_to) -> None:
    result = _invoke("--url", URL, "--entities", ENTITIES, "sync", "--yes")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_sync_without_url_fails(connect_to) -> None:
    result = _invoke("--entities", ENTITIES, "sync", "--yes")

    assert result.exit_code == 1
    assert "No database URL" in result.output


def test_plan_writes_sql_file(connect_to, server, temp_workspace: Path) -> None:
    _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")
    before = server.describe()
    output = temp_workspace / "sync.sql"

    result = _invoke("--url", URL, "--entities", ENTITIES, "plan", "-o", str(output))

    assert result.exit_code == 0
    sql = output.read_text()
    assert "ALTER TABLE Student DROP CONSTRAINT FK_Student_Course;" in sql
    assert server.describe() == before


def test_config_file_supplies_url_and_entities(connect_to, server, temp_workspace: Path) -> None:
    config = temp_workspace / "tablesync.json"
    config.write_text(
        json.dumps(
            {
                "entities": ENTITIES,
                "environments": {"prod": {"databaseUrl": "mssql+pyodbc://prod"}},
            }
        )
    )

    result = _invoke("--config", str(config), "--env", "prod", "create", "--yes")

    assert result.exit_code == 0
    assert connect_to == ["mssql+pyodbc://prod"]


def test_inspect_shows_live_schema(connect_to) -> None:
    _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")

    result = _invoke("--url", URL, "--entities", ENTITIES, "inspect", "Course")

    assert result.exit_code == 0
    assert "Title" in result.output
    assert "Foreign keys: (none)" in result.output


def test_inspect_missing_table(connect_to) -> None:
    result = _invoke("--url", URL, "inspect", "Classroom")

    assert result.exit_code == 0
    assert "does not exist" in result.output


def test_insert_converts_values(connect_to, server) -> None:
    _invoke("--url", URL, "--entities", ENTITIES, "create", "--yes")

    result = _invoke(
        "--url",
        URL,
        "--entities",
        ENTITIES,
        "insert",
        "Course",
        "-v",
        "Id=101",
        "-v",
        "Title=Algebra",
    )

    assert result.exit_code == 0
    assert server.tables["Course"].rows == [{"Id": 101, "Title": "Algebra"}]


def test_insert_unknown_entity(connect_to) -> None:
    result = _invoke("--url", URL, "--entities", ENTITIES, "insert", "Classroom")

    assert result.exit_code == 1
    assert "Entity 'Classroom' not found" in result.output
