"""Queryer capability: executes catalog statements and returns rows."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import psycopg
from psycopg import Connection, sql
from psycopg.rows import dict_row

from sqlreflect.exceptions import QueryError
from sqlreflect.models import TableName
from sqlreflect.query import Select

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class Queryer(Protocol):
    """
    Anything that can run a parameterized statement and return dict rows.

    Failures must be raised as ``psycopg.Error`` (driver and server errors) or
    ``OSError`` (transport errors such as ``ConnectionError``); both surface
    from the loaders as QueryError.
    """

    def query(self, statement: sql.Composable, params: Sequence[Any]) -> list[Row]:
        ...


class ConnectionQueryer:
    """
    Queryer backed by a psycopg connection.

    Rows are returned as dicts keyed by column name. With ``prepare=True``
    statements are prepared server-side on first use and reused afterwards.
    """

    def __init__(self, conn: Connection, prepare: bool | None = None):
        """
        Initialize queryer.

        Args:
            conn: PostgreSQL connection
            prepare: Passed to ``cursor.execute``; None lets psycopg decide
        """
        self.conn = conn
        self.prepare = prepare

    def query(self, statement: sql.Composable, params: Sequence[Any]) -> list[Row]:
        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(statement, params, prepare=self.prepare)
            return cur.fetchall()


def fetch(
    queryer: Queryer, statement: Select, operation: str, table: TableName | str
) -> list[Row]:
    """
    Run a catalog statement, wrapping driver failures into QueryError.

    Args:
        queryer: Queryer capability
        statement: Statement built with :func:`sqlreflect.query.select`
        operation: What is being fetched (used in error messages)
        table: Table the fetch is scoped to

    Returns:
        Rows as mappings

    Raises:
        QueryError: If the queryer raises psycopg.Error or OSError
    """
    logger.debug(
        "Querying %s for %s of %s params=%r",
        statement.relation_name,
        operation,
        table,
        statement.params,
    )
    try:
        return queryer.query(statement, statement.params)
    except (psycopg.Error, OSError) as exc:
        raise QueryError(operation, table, exc) from exc
