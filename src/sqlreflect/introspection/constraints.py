"""Constraint loader and foreign key resolution.

Constraints come from ``information_schema.table_constraints``. Foreign keys
are resolved in a second stage that follows
``referential_constraints`` to the referenced primary key or unique
constraint and pairs the columns of both sides through
``key_column_usage.position_in_unique_constraint``.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from sqlreflect import decode
from sqlreflect.exceptions import DecodeError
from sqlreflect.introspection import table_scope
from sqlreflect.models import (
    Constraint,
    ConstraintType,
    ForeignKeyReference,
    KeyColumn,
    TableName,
)
from sqlreflect.query import select
from sqlreflect.queryer import Queryer, fetch

logger = logging.getLogger(__name__)

CONSTRAINT_FIELDS = (
    "constraint_name",
    "constraint_type",
    "is_deferrable",
    "initially_deferred",
)

REFERENTIAL_FIELDS = (
    "constraint_name",
    "unique_constraint_catalog",
    "unique_constraint_schema",
    "unique_constraint_name",
    "match_option",
    "update_rule",
    "delete_rule",
)

KEY_COLUMN_FIELDS = (
    "constraint_name",
    "column_name",
    "ordinal_position",
    "position_in_unique_constraint",
)

TARGET_COLUMN_FIELDS = (
    "constraint_schema",
    "constraint_name",
    "table_catalog",
    "table_schema",
    "table_name",
    "column_name",
    "ordinal_position",
)


def parse_constraint_type(raw: Any, what: str) -> ConstraintType:
    """
    Map a catalog constraint_type string onto ConstraintType.

    Raises:
        DecodeError: If the catalog reports a kind this library does not know
    """
    try:
        return ConstraintType(raw)
    except ValueError:
        known = ", ".join(kind.value for kind in ConstraintType)
        raise DecodeError(
            what, f"unrecognized constraint_type {raw!r} (expected one of {known})"
        ) from None


def load_constraints(
    queryer: Queryer,
    table: TableName,
    name: str | None = None,
    constraint_type: ConstraintType | None = None,
) -> list[Constraint]:
    """
    Load the constraints of a table, ordered by name.

    Foreign keys in the result have ``references`` populated.

    Args:
        queryer: Queryer capability
        table: Table identity
        name: Only load the constraint with this exact name
        constraint_type: Only load constraints of this kind

    Returns:
        Constraints (empty if none match)

    Raises:
        QueryError: If a catalog query fails
        DecodeError: If a row cannot be decoded or a foreign key target
            cannot be resolved
    """
    where = table_scope(table)
    if name is not None:
        where["constraint_name"] = name
    if constraint_type is not None:
        where["constraint_type"] = constraint_type.value
    statement = select(
        "table_constraints", CONSTRAINT_FIELDS, where, order_by=("constraint_name",)
    )
    rows = fetch(queryer, statement, "constraints", table)
    constraints = [decode_constraint(table, row) for row in rows]
    return resolve_foreign_keys(queryer, table, constraints)


def decode_constraint(table: TableName, row: Mapping[str, Any]) -> Constraint:
    what = f"constraint of '{table}'"
    return Constraint(
        table=table,
        name=decode.text(row, "constraint_name", what),
        constraint_type=parse_constraint_type(
            decode.text(row, "constraint_type", what), what
        ),
        is_deferrable=decode.null_bool(row, "is_deferrable", what),
        initially_deferred=decode.null_bool(row, "initially_deferred", what),
    )


def resolve_foreign_keys(
    queryer: Queryer, table: TableName, constraints: list[Constraint]
) -> list[Constraint]:
    """
    Populate ``references`` on every foreign key in ``constraints``.

    Issues three batched catalog queries regardless of how many foreign keys
    there are; returns the input unchanged when there are none.
    """
    names = [c.name for c in constraints if c.is_foreign_key]
    if not names:
        return constraints

    logger.debug("Resolving %d foreign key(s) of %s", len(names), table)
    references = _load_references(queryer, table, names)

    resolved = []
    for constraint in constraints:
        if constraint.is_foreign_key:
            constraint = replace(constraint, references=references[constraint.name])
        resolved.append(constraint)
    return resolved


def load_key_columns(queryer: Queryer, table: TableName) -> list[KeyColumn]:
    """
    Load every key constraint column of a table.

    Returns:
        Key columns ordered by constraint name, then position in the constraint
    """
    statement = select(
        "key_column_usage",
        KEY_COLUMN_FIELDS,
        table_scope(table),
        order_by=("constraint_name", "ordinal_position"),
    )
    rows = fetch(queryer, statement, "key columns", table)
    return [_decode_key_column(table, row) for row in rows]


def _decode_key_column(table: TableName, row: Mapping[str, Any]) -> KeyColumn:
    what = f"key column of '{table}'"
    return KeyColumn(
        table=table,
        constraint_name=decode.text(row, "constraint_name", what),
        column_name=decode.text(row, "column_name", what),
        ordinal_position=decode.integer(row, "ordinal_position", what),
        position_in_unique_constraint=decode.null_int(
            row, "position_in_unique_constraint", what
        ),
    )


@dataclass(frozen=True)
class _TargetKey:
    table: TableName
    columns: tuple[str, ...]


def _load_references(
    queryer: Queryer, table: TableName, names: list[str]
) -> dict[str, ForeignKeyReference]:
    what = f"foreign key of '{table}'"

    # 1. which key each foreign key points at
    statement = select(
        "referential_constraints",
        REFERENTIAL_FIELDS,
        {
            "constraint_catalog": table.catalog,
            "constraint_schema": table.schema,
            "constraint_name": names,
        },
        order_by=("constraint_name",),
    )
    referential: dict[str, Mapping[str, Any]] = {}
    for row in fetch(queryer, statement, "foreign key targets", table):
        fk_name = decode.text(row, "constraint_name", what)
        if fk_name in referential:
            owners = _tables_with_constraint(queryer, table, fk_name)
            raise DecodeError(
                what,
                f"constraint name '{fk_name}' is not unique within '{table.schema}' "
                f"(used by tables {', '.join(owners)}); referential_constraints is "
                f"keyed by schema and name, so rename one of them to reflect "
                f"its target",
            )
        referential[fk_name] = row

    missing = [n for n in names if n not in referential]
    if missing:
        raise DecodeError(
            what, f"no referential constraint visible for {', '.join(missing)}"
        )

    # 2. local columns of each foreign key
    local_by_fk: dict[str, list[KeyColumn]] = defaultdict(list)
    for kc in _load_fk_columns(queryer, table, names):
        local_by_fk[kc.constraint_name].append(kc)

    # 3. columns of the referenced keys
    target_keys = {
        (
            decode.text(row, "unique_constraint_schema", what),
            decode.text(row, "unique_constraint_name", what),
        )
        for row in referential.values()
    }
    targets = _load_target_keys(queryer, table, target_keys)

    references = {}
    for fk_name in names:
        row = referential[fk_name]
        key = (
            decode.text(row, "unique_constraint_schema", what),
            decode.text(row, "unique_constraint_name", what),
        )
        target = targets.get(key)
        if target is None:
            raise DecodeError(
                what,
                f"'{fk_name}' references '{key[0]}.{key[1]}', "
                f"whose columns are not visible in the catalog",
            )
        columns, referenced = _pair_columns(fk_name, local_by_fk[fk_name], target, what)
        references[fk_name] = ForeignKeyReference(
            table=target.table,
            constraint_name=key[1],
            columns=columns,
            referenced_columns=referenced,
            match_option=decode.null_text(row, "match_option", what),
            update_rule=decode.null_text(row, "update_rule", what),
            delete_rule=decode.null_text(row, "delete_rule", what),
        )
    return references


def _tables_with_constraint(queryer: Queryer, table: TableName, name: str) -> list[str]:
    statement = select(
        "table_constraints",
        ("table_name",),
        {
            "constraint_catalog": table.catalog,
            "constraint_schema": table.schema,
            "constraint_name": name,
        },
        order_by=("table_name",),
    )
    rows = fetch(queryer, statement, "constraint owners", table)
    return [decode.text(row, "table_name", f"owner of '{name}'") for row in rows]


def _load_fk_columns(
    queryer: Queryer, table: TableName, constraint_names: list[str]
) -> list[KeyColumn]:
    where = table_scope(table)
    where["constraint_name"] = constraint_names
    statement = select(
        "key_column_usage",
        KEY_COLUMN_FIELDS,
        where,
        order_by=("constraint_name", "ordinal_position"),
    )
    rows = fetch(queryer, statement, "foreign key columns", table)
    return [_decode_key_column(table, row) for row in rows]


def _load_target_keys(
    queryer: Queryer, table: TableName, keys: set[tuple[str, str]]
) -> dict[tuple[str, str], _TargetKey]:
    what = f"referenced key of '{table}'"
    statement = select(
        "key_column_usage",
        TARGET_COLUMN_FIELDS,
        {
            "constraint_catalog": table.catalog,
            "constraint_schema": sorted({schema for schema, _ in keys}),
            "constraint_name": sorted({name for _, name in keys}),
        },
        order_by=("constraint_schema", "constraint_name", "ordinal_position"),
    )
    grouped: dict[tuple[str, str], list[Mapping[str, Any]]] = defaultdict(list)
    for row in fetch(queryer, statement, "referenced keys", table):
        key = (
            decode.text(row, "constraint_schema", what),
            decode.text(row, "constraint_name", what),
        )
        # schema and name were filtered independently
        if key in keys:
            grouped[key].append(row)

    targets = {}
    for key, rows in grouped.items():
        first = rows[0]
        targets[key] = _TargetKey(
            table=TableName(
                catalog=decode.text(first, "table_catalog", what),
                schema=decode.text(first, "table_schema", what),
                name=decode.text(first, "table_name", what),
            ),
            columns=tuple(decode.text(row, "column_name", what) for row in rows),
        )
    return targets


def _pair_columns(
    fk_name: str, local: list[KeyColumn], target: _TargetKey, what: str
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    if not local:
        raise DecodeError(what, f"'{fk_name}' has no visible columns")
    columns = []
    referenced = []
    for kc in local:
        position = kc.position_in_unique_constraint.value
        if position is None or not 1 <= position <= len(target.columns):
            raise DecodeError(
                what,
                f"'{fk_name}' column '{kc.column_name}' has invalid "
                f"position_in_unique_constraint {position!r}",
            )
        columns.append(kc.column_name)
        referenced.append(target.columns[position - 1])
    return tuple(columns), tuple(referenced)
