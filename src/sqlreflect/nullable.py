"""
Nullable wrappers for catalog fields.

information_schema reports many attributes as nullable: ``is_nullable`` and
``is_grantable`` are ``YES``/``NO`` strings that may also be NULL, lengths and
precisions are NULL for types they do not apply to. Each such field is wrapped
so that "the catalog reported NULL" stays distinct from a real value.

Wrappers refuse implicit truth testing::

    if column.is_nullable:          # TypeError
    if column.is_nullable.is_true:  # explicit
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_YES = "YES"
_NO = "NO"


@dataclass(frozen=True)
class Nullable(Generic[T]):
    """
    A value that is either present or absent (SQL NULL).

    Attributes:
        value: The wrapped value, ``None`` when the catalog reported NULL
    """

    value: T | None = None

    @classmethod
    def present(cls, value: T) -> Nullable[T]:
        if value is None:
            raise ValueError(f"{cls.__name__}.present() requires a value")
        return cls(value)

    @classmethod
    def absent(cls) -> Nullable[T]:
        return cls(None)

    @property
    def valid(self) -> bool:
        """True when the catalog reported a value."""
        return self.value is not None

    def get(self, default: T | None = None) -> T | None:
        """Return the value, or ``default`` when absent."""
        return default if self.value is None else self.value

    def unwrap(self) -> T:
        """Return the value, raising ``ValueError`` when absent."""
        if self.value is None:
            raise ValueError(f"{type(self).__name__} is NULL")
        return self.value

    def __bool__(self) -> bool:
        raise TypeError(
            f"{type(self).__name__} has no truth value; "
            f"check .valid or use .get() to handle NULL explicitly"
        )

    def __str__(self) -> str:
        return "NULL" if self.value is None else str(self.value)


class NullString(Nullable[str]):
    """Nullable text field (defaults, collation names, expressions)."""


class NullInt(Nullable[int]):
    """Nullable integer field (lengths, precisions)."""


class NullBool(Nullable[bool]):
    """
    Tri-state boolean: TRUE, FALSE or UNKNOWN.

    Catalog columns of the ``yes_or_no`` domain decode with
    :meth:`from_catalog`.
    """

    @classmethod
    def from_catalog(cls, raw: Any) -> NullBool:
        """
        Decode a ``yes_or_no`` catalog value.

        Args:
            raw: ``"YES"``, ``"NO"``, a bool, or ``None``

        Returns:
            NullBool instance

        Raises:
            ValueError: If raw is none of the accepted values
        """
        if raw is None:
            return cls(None)
        if isinstance(raw, bool):
            return cls(raw)
        if isinstance(raw, str):
            upper = raw.upper()
            if upper == _YES:
                return cls(True)
            if upper == _NO:
                return cls(False)
        raise ValueError(f"expected YES, NO or NULL, got {raw!r}")

    @property
    def is_true(self) -> bool:
        return self.value is True

    @property
    def is_false(self) -> bool:
        return self.value is False

    @property
    def is_unknown(self) -> bool:
        return self.value is None

    def __str__(self) -> str:
        if self.value is None:
            return "UNKNOWN"
        return _YES if self.value else _NO
