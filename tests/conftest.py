"""Pytest configuration and shared fixtures."""

import os
from collections import defaultdict
from typing import Any

import psycopg
import pytest
from psycopg import Connection

from sqlreflect import ConnectionQueryer, Reflector, Table

CATALOG = "app"
SCHEMA = "public"


class FakeCatalog:
    """
    In-memory stand-in for information_schema.

    Implements the Queryer protocol by evaluating the conditions and ordering
    of a :class:`sqlreflect.query.Select` over canned rows.
    """

    def __init__(self) -> None:
        self.relations: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.statements: list[Any] = []
        self.error: Exception | None = None

    def query(self, statement, params):
        self.statements.append(statement)
        if self.error is not None:
            raise self.error

        schema, relation = statement.relation
        assert schema == "information_schema"
        assert list(params) == statement.params

        rows = [
            row
            for row in self.relations[relation]
            if all(_matches(row, col, value) for col, value in statement.conditions)
        ]
        for col in reversed(statement.order_by):
            rows.sort(key=lambda row: row[col])
        return [{c: row[c] for c in statement.columns if c in row} for row in rows]

    def relations_queried(self) -> list[str]:
        return [s.relation[1] for s in self.statements]

    # Row builders

    def add_table(self, name, schema=SCHEMA, table_type="BASE TABLE"):
        self.relations["tables"].append(
            {
                **_scope(name, schema),
                "table_type": table_type,
                "is_insertable_into": "YES",
                "is_typed": "NO",
            }
        )

    def add_column(self, table, name, position, data_type, nullable, schema=SCHEMA, **extra):
        row = {
            **_scope(table, schema),
            "column_name": name,
            "ordinal_position": position,
            "data_type": data_type,
            "is_nullable": nullable,
            "column_default": None,
            "character_maximum_length": None,
            "character_octet_length": None,
            "numeric_precision": None,
            "numeric_precision_radix": None,
            "numeric_scale": None,
            "datetime_precision": None,
            "interval_type": None,
            "collation_name": None,
            "domain_name": None,
            "udt_name": None,
            "is_identity": "NO",
            "identity_generation": None,
            "is_generated": "NEVER",
            "generation_expression": None,
            "is_updatable": "YES",
        }
        row.update(extra)
        self.relations["columns"].append(row)

    def add_constraint(self, table, name, constraint_type, schema=SCHEMA, columns=()):
        self.relations["table_constraints"].append(
            {
                **_scope(table, schema),
                "constraint_catalog": CATALOG,
                "constraint_schema": schema,
                "constraint_name": name,
                "constraint_type": constraint_type,
                "is_deferrable": "NO",
                "initially_deferred": "NO",
            }
        )
        for position, column in enumerate(columns, start=1):
            self.add_key_column(table, name, column, position, schema=schema)

    def add_key_column(self, table, constraint, column, position, unique_position=None, schema=SCHEMA):
        self.relations["key_column_usage"].append(
            {
                **_scope(table, schema),
                "constraint_catalog": CATALOG,
                "constraint_schema": schema,
                "constraint_name": constraint,
                "column_name": column,
                "ordinal_position": position,
                "position_in_unique_constraint": unique_position,
            }
        )

    def add_foreign_key(self, table, name, columns, target_key, schema=SCHEMA, target_schema=SCHEMA):
        """Add a FOREIGN KEY; columns pair positionally with the target key."""
        self.add_constraint(table, name, "FOREIGN KEY", schema=schema)
        for position, column in enumerate(columns, start=1):
            self.add_key_column(table, name, column, position, unique_position=position, schema=schema)
        self.relations["referential_constraints"].append(
            {
                "constraint_catalog": CATALOG,
                "constraint_schema": schema,
                "constraint_name": name,
                "unique_constraint_catalog": CATALOG,
                "unique_constraint_schema": target_schema,
                "unique_constraint_name": target_key,
                "match_option": "NONE",
                "update_rule": "NO ACTION",
                "delete_rule": "CASCADE",
            }
        )

    def add_privilege(self, table, grantee, privilege_type, grantable, schema=SCHEMA):
        self.relations["table_privileges"].append(
            {
                **_scope(table, schema),
                "grantor": "postgres",
                "grantee": grantee,
                "privilege_type": privilege_type,
                "is_grantable": grantable,
                "with_hierarchy": "YES" if privilege_type == "SELECT" else "NO",
            }
        )

    def add_view(self, name, definition, uses, schema=SCHEMA):
        self.relations["views"].append(
            {
                **_scope(name, schema),
                "view_definition": definition,
                "check_option": "NONE",
                "is_updatable": "NO",
                "is_insertable_into": "NO",
            }
        )
        for table in uses:
            self.relations["view_table_usage"].append(
                {
                    "view_catalog": CATALOG,
                    "view_schema": schema,
                    "view_name": name,
                    **_scope(table, SCHEMA),
                }
            )


def _scope(table, schema):
    return {"table_catalog": CATALOG, "table_schema": schema, "table_name": table}


def _matches(row, column, value):
    if isinstance(value, (list, tuple, set, frozenset)):
        return row.get(column) in value
    return row.get(column) == value


@pytest.fixture
def catalog() -> FakeCatalog:
    """
    Fake catalog describing person, org and employees.

    employees references person and org; the person_names view reads person.
    """
    cat = FakeCatalog()
    cat.relations["information_schema_catalog_name"].append({"catalog_name": CATALOG})

    for table in ("person", "org", "employees"):
        cat.add_table(table)
    cat.add_table("person_names", table_type="VIEW")

    # Inserted out of ordinal order on purpose
    cat.add_column("person", "last_name", 3, "character varying", "YES", character_maximum_length=64, udt_name="varchar")
    cat.add_column("person", "id", 1, "integer", "NO", numeric_precision=32, numeric_precision_radix=2, numeric_scale=0, udt_name="int4")
    cat.add_column("person", "first_name", 2, "character varying", "YES", character_maximum_length=64, udt_name="varchar")
    cat.add_column("org", "id", 1, "integer", "NO")
    cat.add_column("org", "name", 2, "text", "NO")
    cat.add_column("employees", "id", 1, "integer", "NO", column_default="nextval('employees_id_seq'::regclass)")
    cat.add_column("employees", "person_id", 2, "integer", "YES")
    cat.add_column("employees", "org_id", 3, "integer", "YES")

    cat.add_constraint("person", "person_pkey", "PRIMARY KEY", columns=["id"])
    cat.add_constraint("person", "2200_16385_1_not_null", "CHECK")
    cat.add_constraint("org", "org_pkey", "PRIMARY KEY", columns=["id"])
    cat.add_constraint("org", "org_name_key", "UNIQUE", columns=["name"])
    cat.add_constraint("employees", "employees_pkey", "PRIMARY KEY", columns=["id"])
    cat.add_foreign_key("employees", "employees_person_id_fkey", ["person_id"], "person_pkey")
    cat.add_foreign_key("employees", "employees_org_id_fkey", ["org_id"], "org_pkey")

    cat.add_privilege("person", "postgres", "SELECT", "YES")
    cat.add_privilege("person", "postgres", "INSERT", "YES")
    cat.add_privilege("person", "reporting", "SELECT", "NO")

    cat.add_view(
        "person_names",
        " SELECT person.first_name,\n    person.last_name\n   FROM person;",
        uses=["person"],
    )
    return cat


@pytest.fixture
def person(catalog: FakeCatalog) -> Table:
    return Table(catalog, CATALOG, SCHEMA, "person")


@pytest.fixture
def org(catalog: FakeCatalog) -> Table:
    return Table(catalog, CATALOG, SCHEMA, "org")


@pytest.fixture
def employees(catalog: FakeCatalog) -> Table:
    return Table(catalog, CATALOG, SCHEMA, "employees")


# Live database fixtures (tests/integration)

TEST_DATABASE_URL = os.environ.get(
    "SQLREFLECT_TEST_DATABASE_URL", "postgresql://localhost/sqlreflect_test"
)
TEST_SCHEMA = "sqlreflect_test"


@pytest.fixture
def db_conn() -> Connection:
    """
    Provide a test database connection.

    Skips the test when the database in SQLREFLECT_TEST_DATABASE_URL is not
    reachable.
    """
    try:
        conn = psycopg.connect(TEST_DATABASE_URL, autocommit=True, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"test database not available: {e}")

    yield conn

    conn.close()


@pytest.fixture
def test_schema(db_conn: Connection) -> str:
    """
    Create a test schema with person, org, employees and a view over person.

    Returns the schema name.
    """
    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {TEST_SCHEMA} CASCADE")
        cur.execute(f"CREATE SCHEMA {TEST_SCHEMA}")

        cur.execute(f"""
            CREATE TABLE {TEST_SCHEMA}.person (
                id INTEGER PRIMARY KEY,
                first_name VARCHAR(64),
                last_name VARCHAR(64)
            )
        """)

        cur.execute(f"""
            CREATE TABLE {TEST_SCHEMA}.org (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL
            )
        """)

        cur.execute(f"""
            CREATE TABLE {TEST_SCHEMA}.employees (
                id SERIAL PRIMARY KEY,
                person_id INTEGER REFERENCES {TEST_SCHEMA}.person(id),
                org_id INTEGER REFERENCES {TEST_SCHEMA}.org(id)
            )
        """)

        cur.execute(f"""
            CREATE VIEW {TEST_SCHEMA}.person_names AS
            SELECT first_name, last_name FROM {TEST_SCHEMA}.person
        """)

    yield TEST_SCHEMA

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {TEST_SCHEMA} CASCADE")


@pytest.fixture
def reflector(db_conn: Connection, test_schema: str) -> Reflector:
    return Reflector(ConnectionQueryer(db_conn), default_schema=test_schema)
