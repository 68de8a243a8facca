"""View-dependency loader.

``view_table_usage`` lists the views that reference a table; their
definitions come from ``views``.
"""

from collections.abc import Mapping
from typing import Any

from sqlreflect import decode
from sqlreflect.exceptions import DecodeError
from sqlreflect.introspection import table_scope
from sqlreflect.models import TableName, ViewDependency
from sqlreflect.query import select
from sqlreflect.queryer import Queryer, fetch

USAGE_FIELDS = ("view_catalog", "view_schema", "view_name")

VIEW_FIELDS = (
    "table_catalog",
    "table_schema",
    "table_name",
    "view_definition",
    "check_option",
    "is_updatable",
    "is_insertable_into",
)


def load_views(queryer: Queryer, table: TableName) -> list[ViewDependency]:
    """
    Load the views whose definition references a table.

    Returns:
        Views ordered by schema and name, each with its definition text

    Raises:
        QueryError: If a catalog query fails
        DecodeError: If a view's definition is missing or empty
    """
    what = f"view using '{table}'"
    statement = select(
        "view_table_usage",
        USAGE_FIELDS,
        table_scope(table),
        order_by=("view_schema", "view_name"),
    )
    usages = [
        (
            decode.text(row, "view_catalog", what),
            decode.text(row, "view_schema", what),
            decode.text(row, "view_name", what),
        )
        for row in fetch(queryer, statement, "view usage", table)
    ]
    if not usages:
        return []

    statement = select(
        "views",
        VIEW_FIELDS,
        {
            "table_catalog": sorted({catalog for catalog, _, _ in usages}),
            "table_schema": sorted({schema for _, schema, _ in usages}),
            "table_name": sorted({name for _, _, name in usages}),
        },
    )
    definitions = {}
    for row in fetch(queryer, statement, "view definitions", table):
        view = decode_view(row, what)
        definitions[(view.catalog, view.schema, view.name)] = view

    views = []
    for usage in usages:
        view = definitions.get(usage)
        if view is None:
            raise DecodeError(what, f"view '{'.'.join(usage)}' has no catalog entry")
        views.append(view)
    return views


def decode_view(row: Mapping[str, Any], what: str) -> ViewDependency:
    name = decode.text(row, "table_name", what)
    definition = decode.null_text(row, "view_definition", what).get("")
    if not definition.strip():
        raise DecodeError(
            what,
            f"view '{name}' has no definition text "
            f"(is the current role the owner of the view?)",
        )
    return ViewDependency(
        catalog=decode.text(row, "table_catalog", what),
        schema=decode.text(row, "table_schema", what),
        name=name,
        view_definition=definition,
        check_option=decode.null_text(row, "check_option", what),
        is_updatable=decode.null_bool(row, "is_updatable", what),
        is_insertable_into=decode.null_bool(row, "is_insertable_into", what),
    )
