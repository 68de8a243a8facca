"""Privilege loader (information_schema.table_privileges)."""

from collections.abc import Mapping
from typing import Any

from sqlreflect import decode
from sqlreflect.introspection import table_scope
from sqlreflect.models import Privilege, TableName
from sqlreflect.query import select
from sqlreflect.queryer import Queryer, fetch

PRIVILEGE_FIELDS = (
    "grantor",
    "grantee",
    "privilege_type",
    "is_grantable",
    "with_hierarchy",
)


def load_privileges(queryer: Queryer, table: TableName) -> list[Privilege]:
    """Load every privilege granted on a table, ordered by grantee and type."""
    statement = select(
        "table_privileges",
        PRIVILEGE_FIELDS,
        table_scope(table),
        order_by=("grantee", "privilege_type"),
    )
    rows = fetch(queryer, statement, "privileges", table)
    return [decode_privilege(table, row) for row in rows]


def decode_privilege(table: TableName, row: Mapping[str, Any]) -> Privilege:
    what = f"privilege on '{table}'"
    return Privilege(
        table=table,
        grantor=decode.text(row, "grantor", what),
        grantee=decode.text(row, "grantee", what),
        privilege_type=decode.text(row, "privilege_type", what),
        is_grantable=decode.null_bool(row, "is_grantable", what),
        with_hierarchy=decode.null_bool(row, "with_hierarchy", what),
    )
