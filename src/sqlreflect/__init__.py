"""
sqlreflect - Table metadata reflection for PostgreSQL

Reflects columns, constraints, privileges and dependent views of a table
from information_schema into typed, immutable entities.
"""

from sqlreflect.exceptions import (
    AmbiguousPrimaryKeyError,
    DecodeError,
    NotFoundError,
    QueryError,
    SqlReflectError,
)
from sqlreflect.models import (
    Column,
    Constraint,
    ConstraintType,
    ForeignKeyReference,
    KeyColumn,
    Privilege,
    TableName,
    ViewDependency,
)
from sqlreflect.nullable import NullBool, NullInt, NullString
from sqlreflect.queryer import ConnectionQueryer, Queryer
from sqlreflect.reflector import Reflector
from sqlreflect.table import Table

__version__ = "0.1.0"

__all__ = [
    "Reflector",
    "Table",
    "TableName",
    "Column",
    "Constraint",
    "ConstraintType",
    "ForeignKeyReference",
    "KeyColumn",
    "Privilege",
    "ViewDependency",
    "NullBool",
    "NullInt",
    "NullString",
    "Queryer",
    "ConnectionQueryer",
    "SqlReflectError",
    "QueryError",
    "DecodeError",
    "NotFoundError",
    "AmbiguousPrimaryKeyError",
]
