"""Entry point: resolve table names into reflected Table objects."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import psycopg
from psycopg import Connection

from sqlreflect import decode
from sqlreflect.exceptions import DecodeError, NotFoundError, QueryError
from sqlreflect.models import TableName
from sqlreflect.query import select
from sqlreflect.queryer import ConnectionQueryer, Queryer, fetch
from sqlreflect.table import Table

if TYPE_CHECKING:
    from sqlreflect.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"

TABLE_FIELDS = ("table_type", "is_insertable_into", "is_typed")


class Reflector:
    """Look up tables in the catalog and hand out :class:`Table` objects."""

    def __init__(
        self,
        queryer: Queryer,
        default_schema: str = DEFAULT_SCHEMA,
        catalog: str | None = None,
    ):
        """
        Initialize reflector.

        Args:
            queryer: Queryer capability shared by every Table handed out
            default_schema: Schema used when table() is given an empty schema
            catalog: Catalog used when table() is given none; defaults to the
                database the queryer is connected to
        """
        self.queryer = queryer
        self.default_schema = default_schema
        self.catalog = catalog
        self._conn: Connection | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Reflector:
        """
        Connect to the configured database.

        The returned reflector owns the connection; close it with
        :meth:`close` or use the reflector as a context manager.
        """
        db = settings.database
        try:
            conn = psycopg.connect(db.url, autocommit=True)
        except psycopg.Error as exc:
            raise QueryError("connection", db.catalog or "database", exc) from exc
        reflector = cls(
            ConnectionQueryer(conn, prepare=db.prepare),
            default_schema=db.default_schema,
            catalog=db.catalog,
        )
        reflector._conn = conn
        return reflector

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> Reflector:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def current_catalog(self) -> str:
        """Get the name of the database the queryer is connected to."""
        statement = select("information_schema_catalog_name", ("catalog_name",))
        rows = fetch(self.queryer, statement, "catalog name", "current database")
        if len(rows) != 1:
            raise DecodeError("catalog name", f"expected one row, got {len(rows)}")
        return decode.text(rows[0], "catalog_name", "catalog name")

    def table(self, name: str, catalog: str | None = None, schema: str = "") -> Table:
        """
        Look up a table.

        Args:
            name: Table name
            catalog: Catalog name (defaults to the reflector's catalog)
            schema: Schema name (empty means the default schema)

        Returns:
            Table carrying its catalog attributes

        Raises:
            NotFoundError: If the table does not exist or is not visible
            QueryError: If the catalog query fails
        """
        catalog = catalog or self.catalog or self.current_catalog()
        schema = schema or self.default_schema
        identity = TableName(catalog, schema, name)

        statement = select(
            "tables",
            TABLE_FIELDS,
            {"table_catalog": catalog, "table_schema": schema, "table_name": name},
        )
        rows = fetch(self.queryer, statement, "table", identity)
        if not rows:
            raise NotFoundError("table", name, f"{catalog}.{schema}")

        what = f"table '{identity}'"
        row = rows[0]
        table = Table(
            self.queryer,
            catalog,
            schema,
            name,
            table_type=decode.null_text(row, "table_type", what).value,
            is_insertable_into=decode.null_bool(row, "is_insertable_into", what),
            is_typed=decode.null_bool(row, "is_typed", what),
        )
        logger.info("Reflecting %s (%s)", identity, table.table_type or "unknown type")
        return table
