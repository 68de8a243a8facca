"""Column loader (information_schema.columns)."""

from collections.abc import Mapping
from typing import Any

from sqlreflect import decode
from sqlreflect.exceptions import DecodeError
from sqlreflect.introspection import table_scope
from sqlreflect.models import Column, TableName
from sqlreflect.query import select
from sqlreflect.queryer import Queryer, fetch

COLUMN_FIELDS = (
    "column_name",
    "ordinal_position",
    "data_type",
    "is_nullable",
    "column_default",
    "character_maximum_length",
    "character_octet_length",
    "numeric_precision",
    "numeric_precision_radix",
    "numeric_scale",
    "datetime_precision",
    "interval_type",
    "collation_name",
    "domain_name",
    "udt_name",
    "is_identity",
    "identity_generation",
    "is_generated",
    "generation_expression",
    "is_updatable",
)


def load_columns(
    queryer: Queryer, table: TableName, name: str | None = None
) -> list[Column]:
    """
    Load the columns of a table in ordinal order.

    Args:
        queryer: Queryer capability
        table: Table identity
        name: Only load the column with this exact name

    Returns:
        Columns ordered by ordinal_position (empty if none match)

    Raises:
        QueryError: If the catalog query fails
        DecodeError: If a row does not have the column shape
    """
    where = table_scope(table)
    if name is not None:
        where["column_name"] = name
    statement = select("columns", COLUMN_FIELDS, where, order_by=("ordinal_position",))
    rows = fetch(queryer, statement, "columns", table)
    return [decode_column(table, row) for row in rows]


def decode_column(table: TableName, row: Mapping[str, Any]) -> Column:
    what = f"column of '{table}'"
    position = decode.integer(row, "ordinal_position", what)
    if position < 1:
        raise DecodeError(what, f"ordinal_position must be >= 1, got {position}")
    return Column(
        table=table,
        name=decode.text(row, "column_name", what),
        ordinal_position=position,
        data_type=decode.text(row, "data_type", what),
        is_nullable=decode.null_bool(row, "is_nullable", what),
        column_default=decode.null_text(row, "column_default", what),
        character_maximum_length=decode.null_int(row, "character_maximum_length", what),
        character_octet_length=decode.null_int(row, "character_octet_length", what),
        numeric_precision=decode.null_int(row, "numeric_precision", what),
        numeric_precision_radix=decode.null_int(row, "numeric_precision_radix", what),
        numeric_scale=decode.null_int(row, "numeric_scale", what),
        datetime_precision=decode.null_int(row, "datetime_precision", what),
        interval_type=decode.null_text(row, "interval_type", what),
        collation_name=decode.null_text(row, "collation_name", what),
        domain_name=decode.null_text(row, "domain_name", what),
        udt_name=decode.null_text(row, "udt_name", what),
        is_identity=decode.null_bool(row, "is_identity", what),
        identity_generation=decode.null_text(row, "identity_generation", what),
        is_generated=decode.null_text(row, "is_generated", what),
        generation_expression=decode.null_text(row, "generation_expression", what),
        is_updatable=decode.null_bool(row, "is_updatable", what),
    )
