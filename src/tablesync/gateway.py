"""
Database Gateway

Defines the contract the core uses to talk to the database and provides a
SQLAlchemy-backed implementation. Every statement is its own round trip on an
autocommit connection; nothing is batched or wrapped in a transaction.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy import Connection, create_engine, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .exceptions import DatabaseConnectionError, StatementExecutionFailure

logger = logging.getLogger(__name__)

Row = Sequence[Any]


class DatabaseGateway(Protocol):
    """Protocol for executing statements and queries against a database

    Implementations raise StatementExecutionFailure when the database
    rejects a statement; callers never retry.
    """

    def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> None:
        """Execute a statement that returns no rows"""
        ...

    def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        """Run a query and return its rows (values addressable by ordinal)"""
        ...


def _driver_message(err: SQLAlchemyError) -> str:
    if isinstance(err, DBAPIError) and err.orig is not None:
        return str(err.orig)
    return str(err)


class SqlAlchemyGateway:
    """Gateway over a single SQLAlchemy connection

    Attributes:
        connection: Open connection, expected to run in AUTOCOMMIT mode
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> None:
        logger.debug("Executing: %s", statement)
        try:
            if params is None:
                # DDL goes to the driver untouched so CHECK expressions are not
                # scanned for bind parameters.
                self.connection.exec_driver_sql(statement)
            else:
                self.connection.execute(text(statement), dict(params))
        except SQLAlchemyError as err:
            raise StatementExecutionFailure(statement, _driver_message(err)) from err

    def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        logger.debug("Querying: %s", statement)
        try:
            result = self.connection.execute(text(statement), dict(params or {}))
            return list(result.all())
        except SQLAlchemyError as err:
            raise StatementExecutionFailure(statement, _driver_message(err)) from err


@contextmanager
def open_gateway(
    url: str, echo: bool = False, **engine_options: Any
) -> Iterator[SqlAlchemyGateway]:
    """Open a connection-scoped gateway

    The connection is released and the engine disposed on every exit path.

    Args:
        url: SQLAlchemy database URL, e.g. ``mssql+pyodbc://...``
        echo: Echo SQL through SQLAlchemy's own logger
        **engine_options: Passed through to ``create_engine``

    Raises:
        DatabaseConnectionError: If the connection cannot be opened
    """
    try:
        engine = create_engine(url, echo=echo, **engine_options)
    except (SQLAlchemyError, ImportError, ValueError) as err:
        raise DatabaseConnectionError(f"Cannot create engine for database URL: {err}") from err

    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as err:
            raise DatabaseConnectionError(
                f"Cannot connect to database: {_driver_message(err)}"
            ) from err
        with connection:
            connection.execution_options(isolation_level="AUTOCOMMIT")
            yield SqlAlchemyGateway(connection)
    finally:
        engine.dispose()


class DryRunGateway:
    """Gateway that forwards reads and records writes without executing them

    With no inner gateway every read returns no rows, so every table looks
    like it does not exist yet.

    Attributes:
        inner: Gateway used for reads (optional)
        statements: Statements that would have been executed, in order
    """

    def __init__(self, inner: DatabaseGateway | None = None) -> None:
        self.inner = inner
        self.statements: list[str] = []

    def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> None:
        logger.debug("Dry run, not executing: %s", statement)
        self.statements.append(statement)

    def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        if self.inner is None:
            return []
        return self.inner.query(statement, params)
