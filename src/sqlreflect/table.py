"""Table reflection: columns, constraints, privileges and dependent views."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlreflect.exceptions import AmbiguousPrimaryKeyError, NotFoundError
from sqlreflect.introspection.columns import load_columns
from sqlreflect.introspection.constraints import load_constraints, load_key_columns
from sqlreflect.introspection.privileges import load_privileges
from sqlreflect.introspection.views import load_views
from sqlreflect.models import (
    Column,
    Constraint,
    ConstraintType,
    KeyColumn,
    Privilege,
    TableName,
    ViewDependency,
)
from sqlreflect.nullable import NullBool
from sqlreflect.queryer import Queryer


@dataclass(frozen=True)
class Table:
    """
    A table in the catalog, identified by catalog, schema and name.

    Every method queries the catalog afresh; results are never cached, so
    calling :meth:`columns` twice issues two queries. Equality and hashing
    use the identity only.

    Attributes:
        queryer: Queryer capability used for every lookup
        catalog: Database (catalog) name
        schema: Schema name
        name: Table name
        table_type: BASE TABLE, VIEW, FOREIGN, LOCAL TEMPORARY (if known)
        is_insertable_into: Whether rows can be inserted
        is_typed: Whether the table is a typed table
    """

    queryer: Queryer = field(compare=False, repr=False)
    catalog: str
    schema: str
    name: str
    table_type: str | None = field(default=None, compare=False)
    is_insertable_into: NullBool = field(default_factory=NullBool, compare=False)
    is_typed: NullBool = field(default_factory=NullBool, compare=False)

    @property
    def identity(self) -> TableName:
        return TableName(self.catalog, self.schema, self.name)

    def __str__(self) -> str:
        return str(self.identity)

    def columns(self) -> list[Column]:
        """
        Get all columns, ordered by ordinal position.

        Raises:
            QueryError: If the catalog query fails
            DecodeError: If a row cannot be decoded
        """
        return load_columns(self.queryer, self.identity)

    def column(self, name: str) -> Column:
        """
        Get one column by exact name.

        Raises:
            NotFoundError: If the table has no such column
        """
        found = load_columns(self.queryer, self.identity, name=name)
        if not found:
            raise NotFoundError("column", name, self.identity)
        return found[0]

    def constraints(self) -> list[Constraint]:
        """Get all constraints, with foreign key targets resolved."""
        return load_constraints(self.queryer, self.identity)

    def constraints_by_type(self, kind: ConstraintType | str) -> list[Constraint]:
        """
        Get the constraints of one kind.

        Args:
            kind: Constraint kind; strings must be an exact kind value
                such as "PRIMARY KEY"

        Returns:
            Matching constraints, empty if there are none

        Raises:
            ValueError: If kind is not a constraint kind
        """
        return load_constraints(
            self.queryer, self.identity, constraint_type=ConstraintType(kind)
        )

    def constraint(self, name: str) -> Constraint:
        """
        Get one constraint by exact name.

        Raises:
            NotFoundError: If the table has no such constraint
        """
        found = load_constraints(self.queryer, self.identity, name=name)
        if not found:
            raise NotFoundError("constraint", name, self.identity)
        return found[0]

    def primary_key(self) -> Constraint:
        """
        Get the primary key constraint.

        Raises:
            NotFoundError: If the table has no primary key
            AmbiguousPrimaryKeyError: If the catalog reports more than one
        """
        found = self.constraints_by_type(ConstraintType.PRIMARY_KEY)
        if not found:
            raise NotFoundError("primary key", self.name, self.identity)
        if len(found) > 1:
            raise AmbiguousPrimaryKeyError(self.identity, [c.name for c in found])
        return found[0]

    def foreign_keys(self) -> list[Constraint]:
        """Get the foreign key constraints, each with ``references`` resolved."""
        return self.constraints_by_type(ConstraintType.FOREIGN_KEY)

    def key_columns(self) -> list[KeyColumn]:
        """Get the columns of every primary key, unique and foreign key constraint."""
        return load_key_columns(self.queryer, self.identity)

    def privileges(self) -> list[Privilege]:
        """Get every privilege granted on the table."""
        return load_privileges(self.queryer, self.identity)

    def in_views(self) -> list[ViewDependency]:
        """Get the views whose definition references the table."""
        return load_views(self.queryer, self.identity)
