"""
Parameterized SELECT builder for catalog relations.

Identifiers are quoted with :class:`psycopg.sql.Identifier` and every value
travels as a query parameter; nothing is interpolated into the SQL text.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from psycopg import sql

INFORMATION_SCHEMA = "information_schema"

_MULTI_VALUE_TYPES = (list, tuple, set, frozenset)


class Select(sql.Composed):
    """
    A composed ``SELECT`` statement plus the parameters it expects.

    Behaves as a regular :class:`psycopg.sql.Composed` when executed, and keeps
    the pieces it was built from so callers can inspect it.

    Attributes:
        relation: ``(schema, name)`` of the relation selected from
        columns: Selected column names
        conditions: ``(column, value)`` pairs; a collection value means ``= ANY``
        order_by: Column names the result is ordered by
        params: Parameters in placeholder order
    """

    def __init__(
        self,
        relation: tuple[str, str],
        columns: Sequence[str],
        conditions: Sequence[tuple[str, Any]] = (),
        order_by: Sequence[str] = (),
    ):
        if not columns:
            raise ValueError("SELECT requires at least one column")
        self.relation = relation
        self.columns = tuple(columns)
        self.conditions = tuple(conditions)
        self.order_by = tuple(order_by)
        self.params: list[Any] = []

        parts: list[sql.Composable] = [
            sql.SQL("SELECT "),
            sql.SQL(", ").join(sql.Identifier(c) for c in self.columns),
            sql.SQL(" FROM "),
            sql.Identifier(*relation),
        ]
        if self.conditions:
            clauses = []
            for column, value in self.conditions:
                if isinstance(value, _MULTI_VALUE_TYPES):
                    template = "{} = ANY({})"
                    self.params.append(list(value))
                else:
                    template = "{} = {}"
                    self.params.append(value)
                clauses.append(
                    sql.SQL(template).format(sql.Identifier(column), sql.Placeholder())
                )
            parts += [sql.SQL(" WHERE "), sql.SQL(" AND ").join(clauses)]
        if self.order_by:
            parts += [
                sql.SQL(" ORDER BY "),
                sql.SQL(", ").join(sql.Identifier(c) for c in self.order_by),
            ]
        super().__init__(parts)

    @property
    def relation_name(self) -> str:
        return ".".join(self.relation)


def select(
    relation: str,
    columns: Iterable[str],
    where: Mapping[str, Any] | None = None,
    order_by: Iterable[str] = (),
    schema: str = INFORMATION_SCHEMA,
) -> Select:
    """
    Build a SELECT against a catalog relation.

    Args:
        relation: Relation name (e.g. "columns")
        columns: Columns to select
        where: Equality conditions; list/tuple/set values become ``= ANY(...)``
        order_by: Columns to order by, ascending
        schema: Schema of the relation (default: information_schema)

    Returns:
        Select statement; its ``params`` match the placeholders
    """
    conditions = list((where or {}).items())
    return Select((schema, relation), list(columns), conditions, list(order_by))
