"""Field-by-field decoding of catalog rows."""

from collections.abc import Mapping
from typing import Any

from sqlreflect.exceptions import DecodeError
from sqlreflect.nullable import NullBool, NullInt, NullString


def _get(row: Mapping[str, Any], field: str, what: str) -> Any:
    if field not in row:
        raise DecodeError(what, f"row has no field '{field}'")
    return row[field]


def text(row: Mapping[str, Any], field: str, what: str) -> str:
    """Decode a NOT NULL text field."""
    value = _get(row, field, what)
    if not isinstance(value, str):
        raise DecodeError(what, f"field '{field}' expected text, got {value!r}")
    return value


def integer(row: Mapping[str, Any], field: str, what: str) -> int:
    """Decode a NOT NULL integer field."""
    value = _get(row, field, what)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(what, f"field '{field}' expected integer, got {value!r}")
    return value


def null_text(row: Mapping[str, Any], field: str, what: str) -> NullString:
    value = _get(row, field, what)
    if value is None:
        return NullString()
    if not isinstance(value, str):
        raise DecodeError(what, f"field '{field}' expected text or NULL, got {value!r}")
    return NullString(value)


def null_int(row: Mapping[str, Any], field: str, what: str) -> NullInt:
    value = _get(row, field, what)
    if value is None:
        return NullInt()
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(
            what, f"field '{field}' expected integer or NULL, got {value!r}"
        )
    return NullInt(value)


def null_bool(row: Mapping[str, Any], field: str, what: str) -> NullBool:
    """Decode a ``yes_or_no`` field into a tri-state boolean."""
    value = _get(row, field, what)
    try:
        return NullBool.from_catalog(value)
    except ValueError as exc:
        raise DecodeError(what, f"field '{field}': {exc}") from exc
