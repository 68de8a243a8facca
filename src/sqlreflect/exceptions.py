"""Custom exceptions with helpful error messages."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlreflect.models import TableName


class SqlReflectError(Exception):
    """Base exception for sqlreflect errors."""

    pass


class QueryError(SqlReflectError):
    """A catalog query failed to execute."""

    def __init__(self, operation: str, table: TableName | str, cause: BaseException):
        self.operation = operation
        self.table = table
        self.cause = cause
        super().__init__(
            f"Catalog query for {operation} of '{table}' failed: {cause}\n\n"
            f"Suggestions:\n"
            f"1. Check database connection settings\n"
            f"2. Ensure the current role may read information_schema\n"
            f"3. Retry once the database is reachable"
        )


class DecodeError(SqlReflectError):
    """A catalog row could not be mapped to the expected entity shape."""

    def __init__(self, what: str, detail: str):
        self.what = what
        self.detail = detail
        super().__init__(f"Could not decode {what}: {detail}")


class AmbiguousPrimaryKeyError(DecodeError):
    """The catalog reported more than one primary key for a table."""

    def __init__(self, table: TableName | str, names: list[str]):
        self.table = table
        self.names = names
        super().__init__(
            f"primary key of '{table}'",
            f"catalog reported {len(names)} primary key constraints "
            f"({', '.join(names)}); expected at most one",
        )


class NotFoundError(SqlReflectError):
    """A lookup by name matched nothing."""

    def __init__(self, kind: str, name: str, table: TableName | str | None = None):
        self.kind = kind
        self.name = name
        self.table = table
        where = f" on '{table}'" if table is not None else ""
        super().__init__(
            f"{kind.capitalize()} '{name}' not found{where}.\n\n"
            f"Suggestions:\n"
            f"1. Check {kind} name spelling (names are case-sensitive)\n"
            f"2. List what exists with the matching listing call\n"
            f"3. Ensure the current role has privileges on the object"
        )
