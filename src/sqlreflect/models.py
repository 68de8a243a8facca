"""Data models and type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlreflect.nullable import Nullable, NullBool, NullInt, NullString


@dataclass(frozen=True)
class TableName:
    """
    Identity of a table in the catalog.

    Attributes:
        catalog: Database (catalog) name
        schema: Schema name
        name: Table name
    """

    catalog: str
    schema: str
    name: str

    def __str__(self) -> str:
        return f"{self.catalog}.{self.schema}.{self.name}"


class ConstraintType(str, Enum):
    """Constraint kinds reported by ``information_schema.table_constraints``."""

    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Column:
    """
    Column metadata from ``information_schema.columns``.

    Attributes:
        table: Owning table
        name: Column name
        ordinal_position: 1-based position within the table
        data_type: SQL data type name (e.g. "integer", "character varying")
        is_nullable: Whether the column accepts NULL
        column_default: Default value expression
        character_maximum_length: Declared length of character types
        character_octet_length: Maximum length in octets
        numeric_precision: Precision of numeric types
        numeric_precision_radix: Radix of numeric_precision (2 or 10)
        numeric_scale: Scale of exact numeric types
        datetime_precision: Fractional seconds precision
        interval_type: Fields of interval types
        collation_name: Explicit collation
        domain_name: Domain the column is declared with
        udt_name: Underlying type name (e.g. "int4", "varchar")
        is_identity: Whether the column is an identity column
        identity_generation: ALWAYS or BY DEFAULT for identity columns
        is_generated: ALWAYS for generated columns, NEVER otherwise
        generation_expression: Expression of generated columns
        is_updatable: Whether the column can be updated
    """

    table: TableName
    name: str
    ordinal_position: int
    data_type: str
    is_nullable: NullBool = field(default_factory=NullBool)
    column_default: NullString = field(default_factory=NullString)
    character_maximum_length: NullInt = field(default_factory=NullInt)
    character_octet_length: NullInt = field(default_factory=NullInt)
    numeric_precision: NullInt = field(default_factory=NullInt)
    numeric_precision_radix: NullInt = field(default_factory=NullInt)
    numeric_scale: NullInt = field(default_factory=NullInt)
    datetime_precision: NullInt = field(default_factory=NullInt)
    interval_type: NullString = field(default_factory=NullString)
    collation_name: NullString = field(default_factory=NullString)
    domain_name: NullString = field(default_factory=NullString)
    udt_name: NullString = field(default_factory=NullString)
    is_identity: NullBool = field(default_factory=NullBool)
    identity_generation: NullString = field(default_factory=NullString)
    is_generated: NullString = field(default_factory=NullString)
    generation_expression: NullString = field(default_factory=NullString)
    is_updatable: NullBool = field(default_factory=NullBool)

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class ForeignKeyReference:
    """
    Target of a foreign key constraint.

    ``columns[i]`` references ``referenced_columns[i]``.

    Attributes:
        table: Referenced table
        constraint_name: Primary key or unique constraint being referenced
        columns: Referencing columns in the owning table
        referenced_columns: Referenced columns in the target table
        match_option: FULL, PARTIAL or NONE
        update_rule: ON UPDATE action
        delete_rule: ON DELETE action
    """

    table: TableName
    constraint_name: str
    columns: tuple[str, ...]
    referenced_columns: tuple[str, ...]
    match_option: NullString = field(default_factory=NullString)
    update_rule: NullString = field(default_factory=NullString)
    delete_rule: NullString = field(default_factory=NullString)


@dataclass(frozen=True)
class Constraint:
    """
    Constraint metadata from ``information_schema.table_constraints``.

    Attributes:
        table: Owning table
        name: Constraint name (unique within the schema)
        constraint_type: Constraint kind
        is_deferrable: Whether checking can be deferred
        initially_deferred: Whether checking is deferred by default
        references: Foreign key target, set only for FOREIGN KEY constraints
    """

    table: TableName
    name: str
    constraint_type: ConstraintType
    is_deferrable: NullBool = field(default_factory=NullBool)
    initially_deferred: NullBool = field(default_factory=NullBool)
    references: ForeignKeyReference | None = None

    @property
    def is_foreign_key(self) -> bool:
        return self.constraint_type is ConstraintType.FOREIGN_KEY

    @property
    def is_self_referencing(self) -> bool:
        """Whether this foreign key references its own table."""
        return self.references is not None and self.references.table == self.table

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class KeyColumn:
    """
    One column of a key constraint, from ``information_schema.key_column_usage``.

    Attributes:
        table: Owning table
        constraint_name: Constraint the column belongs to
        column_name: Column name
        ordinal_position: 1-based position within the constraint
        position_in_unique_constraint: For foreign keys, position of the
            referenced column within the referenced key
    """

    table: TableName
    constraint_name: str
    column_name: str
    ordinal_position: int
    position_in_unique_constraint: NullInt = field(default_factory=NullInt)

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class Privilege:
    """
    One granted privilege from ``information_schema.table_privileges``.

    Attributes:
        table: Table the privilege applies to
        grantor: Role that granted the privilege
        grantee: Role the privilege was granted to
        privilege_type: SELECT, INSERT, UPDATE, DELETE, TRUNCATE, REFERENCES or TRIGGER
        is_grantable: Whether the grantee may grant it onwards
        with_hierarchy: Whether the grant covers inheritance children
    """

    table: TableName
    grantor: str
    grantee: str
    privilege_type: str
    is_grantable: NullBool = field(default_factory=NullBool)
    with_hierarchy: NullBool = field(default_factory=NullBool)

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class ViewDependency:
    """
    A view whose definition references a table.

    Attributes:
        catalog: View catalog
        schema: View schema
        name: View name
        view_definition: Query text of the view (never empty)
        check_option: CASCADED, LOCAL or NONE
        is_updatable: Whether the view is updatable
        is_insertable_into: Whether rows can be inserted through the view
    """

    catalog: str
    schema: str
    name: str
    view_definition: str
    check_option: NullString = field(default_factory=NullString)
    is_updatable: NullBool = field(default_factory=NullBool)
    is_insertable_into: NullBool = field(default_factory=NullBool)

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


def _plain(obj: Any) -> Any:
    """Convert an entity into JSON-friendly builtins (NULL fields become None)."""
    if isinstance(obj, Nullable):
        return obj.value
    if isinstance(obj, TableName):
        return {"catalog": obj.catalog, "schema": obj.schema, "name": obj.name}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, tuple):
        return [_plain(item) for item in obj]
    if hasattr(obj, "__dataclass_fields__"):
        return {name: _plain(getattr(obj, name)) for name in obj.__dataclass_fields__}
    return obj
