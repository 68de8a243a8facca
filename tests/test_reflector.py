"""Tests for the Reflector entry point."""

import psycopg
import pytest

from sqlreflect import DecodeError, NotFoundError, QueryError, Reflector, Table
from sqlreflect.config import DatabaseConfig, Settings

from conftest import CATALOG, SCHEMA


def test_table_lookup(catalog):
    reflector = Reflector(catalog, catalog=CATALOG)
    table = reflector.table("person")

    assert isinstance(table, Table)
    assert (table.catalog, table.schema, table.name) == (CATALOG, SCHEMA, "person")
    assert table.table_type == "BASE TABLE"
    assert table.is_insertable_into.is_true
    assert table.is_typed.is_false


def test_table_lookup_resolves_current_catalog(catalog):
    reflector = Reflector(catalog)
    table = reflector.table("org")

    assert table.catalog == CATALOG
    assert catalog.relations_queried() == ["information_schema_catalog_name", "tables"]


def test_current_catalog_reads_information_schema_catalog_name(catalog):
    reflector = Reflector(catalog)

    assert reflector.current_catalog() == CATALOG
    statement = catalog.statements[-1]
    assert statement.relation == ("information_schema", "information_schema_catalog_name")
    assert statement.params == []


def test_current_catalog_requires_one_row(catalog):
    catalog.relations["information_schema_catalog_name"].clear()

    with pytest.raises(DecodeError, match="expected one row, got 0"):
        Reflector(catalog).current_catalog()


def test_table_lookup_default_schema(catalog):
    catalog.add_table("ledger", schema="accounts")
    reflector = Reflector(catalog, default_schema="accounts", catalog=CATALOG)

    assert reflector.table("ledger").schema == "accounts"
    assert reflector.table("person", schema=SCHEMA).schema == SCHEMA


def test_table_not_found(catalog):
    reflector = Reflector(catalog, catalog=CATALOG)

    with pytest.raises(NotFoundError, match="Table 'nope' not found on 'app.public'"):
        reflector.table("nope")


def test_table_identity_equality(catalog):
    """Tables compare by identity only."""
    reflector = Reflector(catalog, catalog=CATALOG)
    looked_up = reflector.table("person")
    direct = Table(catalog, CATALOG, SCHEMA, "person")

    assert looked_up == direct
    assert hash(looked_up) == hash(direct)
    assert str(direct) == "app.public.person"


def test_tables_are_immutable(catalog):
    table = Table(catalog, CATALOG, SCHEMA, "person")

    with pytest.raises(AttributeError):
        table.name = "org"


def test_reflected_table_chains_lookups(catalog):
    table = Reflector(catalog, catalog=CATALOG).table("employees")

    assert len(table.foreign_keys()) == 2
    assert table.primary_key().name == "employees_pkey"


def test_query_error_on_lookup(catalog):
    catalog.error = psycopg.OperationalError("server closed the connection")

    with pytest.raises(QueryError, match="server closed"):
        Reflector(catalog, catalog=CATALOG).table("person")


def test_from_settings_connect_failure(monkeypatch):
    def fail(*args, **kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(psycopg, "connect", fail)
    settings = Settings(database=DatabaseConfig(url="postgresql://nowhere/db"))

    with pytest.raises(QueryError, match="connection refused"):
        Reflector.from_settings(settings)


def test_from_settings_owns_connection(monkeypatch):
    class _Conn:
        closed = False

        def close(self):
            self.closed = True

    conn = _Conn()
    monkeypatch.setattr(psycopg, "connect", lambda *a, **kw: conn)
    settings = Settings(
        database=DatabaseConfig(url="postgresql://db/app", default_schema="sales", prepare=True)
    )

    with Reflector.from_settings(settings) as reflector:
        assert reflector.default_schema == "sales"
        assert reflector.queryer.prepare is True

    assert conn.closed
