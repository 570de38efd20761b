import pytest
import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from tablesync.context import SchemaContext
from tests.utils import FakeGateway, FakeSqlServer, course_entity, student_entity


@pytest.fixture
def temp_workspace(tmp_path):
    """Create a temporary workspace directory"""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def server():
    """Empty in-memory database"""
    return FakeSqlServer()


@pytest.fixture
def gateway(server):
    """Gateway over the in-memory database"""
    return FakeGateway(server)


@pytest.fixture
def schema_context(server):
    """SchemaContext whose connections open on the in-memory database"""
    return SchemaContext(connect=server.connect)


@pytest.fixture
def course():
    return course_entity()


@pytest.fixture
def student():
    return student_entity()


# CREATE TABLE validation
def parse_create_table(sql: str) -> tuple[exp.Create | None, str]:
    """
    Parse a CREATE TABLE statement with SQLGlot's T-SQL dialect.

    Returns:
        Tuple of (parsed statement or None, error message)
    """
    try:
        parsed = sqlglot.parse_one(sql, dialect="tsql")
    except (ParseError, TokenError) as e:
        return None, f"SQLGlot parsing error: {e}"
    if not isinstance(parsed, exp.Create) or parsed.kind != "TABLE":
        return None, f"not a CREATE TABLE statement: {type(parsed).__name__}"
    return parsed, ""


def assert_create_table(sql: str, table: str | None = None, columns: int | None = None) -> None:
    """Assert that sql is a well-formed CREATE TABLE, optionally for a given table and width"""
    parsed, error = parse_create_table(sql)
    assert parsed is not None, f"Invalid SQL:\n{sql}\n\nError: {error}"
    if table is not None:
        assert parsed.find(exp.Table).name == table
    if columns is not None:
        assert len(list(parsed.find_all(exp.ColumnDef))) == columns


@pytest.fixture
def assert_sql():
    """Fixture that provides the CREATE TABLE assertion"""
    return assert_create_table
