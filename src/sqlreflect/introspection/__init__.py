"""
Catalog loaders.

Each loader is a plain function of ``(queryer, table)`` that issues its
catalog queries and returns freshly decoded entities. Nothing is cached.
"""

from typing import Any

from sqlreflect.models import TableName


def table_scope(table: TableName) -> dict[str, Any]:
    """WHERE conditions selecting one table in relations keyed by table_*."""
    return {
        "table_catalog": table.catalog,
        "table_schema": table.schema,
        "table_name": table.name,
    }
