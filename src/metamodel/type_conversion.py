"""Conversion between SQLAlchemy types and vendor type codes.

Codes follow the ``java.sql.Types`` numbering that catalog APIs commonly
report, so rows gathered from any driver share one vocabulary.
"""

from enum import IntEnum
from typing import Any, NamedTuple

from sqlalchemy.types import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    SmallInteger,
    String,
    Text,
    Time,
    TypeEngine,
)


class SqlType(IntEnum):
    """Vendor type codes understood by the model."""

    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARBINARY = -4
    VARBINARY = -3
    BINARY = -2
    LONGVARCHAR = -1
    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    BLOB = 2004
    CLOB = 2005


class TypeInfo(NamedTuple):
    """Holds information about a SQLAlchemy type for code generation."""

    module: str
    name: str
    expression: str


def sql_to_type_code(sql_type: TypeEngine[Any]) -> int:
    """Map a reflected SQLAlchemy type onto a vendor type code.

    Subclasses are matched before their bases (Text is a String, Float is a
    Numeric, Enum is a String).
    """
    match sql_type:
        case Enum():
            return SqlType.VARCHAR
        case Boolean():
            return SqlType.BOOLEAN
        case BigInteger():
            return SqlType.BIGINT
        case SmallInteger():
            return SqlType.SMALLINT
        case Integer():
            return SqlType.INTEGER
        case Text():
            return SqlType.LONGVARCHAR
        case String():
            return SqlType.VARCHAR
        case Float():
            return SqlType.REAL
        case Numeric():
            return SqlType.NUMERIC
        case LargeBinary():
            return SqlType.BLOB
        case DateTime():
            return SqlType.TIMESTAMP
        case Date():
            return SqlType.DATE
        case Time():
            return SqlType.TIME
        case _:
            return SqlType.OTHER


TYPE_CODE_TO_SQL: dict[int, type[TypeEngine[Any]]] = {
    SqlType.BIT: Boolean,
    SqlType.BOOLEAN: Boolean,
    SqlType.TINYINT: SmallInteger,
    SqlType.SMALLINT: SmallInteger,
    SqlType.INTEGER: Integer,
    SqlType.BIGINT: BigInteger,
    SqlType.CHAR: String,
    SqlType.VARCHAR: String,
    SqlType.LONGVARCHAR: Text,
    SqlType.CLOB: Text,
    SqlType.NUMERIC: Numeric,
    SqlType.DECIMAL: Numeric,
    SqlType.FLOAT: Float,
    SqlType.REAL: Float,
    SqlType.DOUBLE: Float,
    SqlType.DATE: Date,
    SqlType.TIME: Time,
    SqlType.TIMESTAMP: DateTime,
    SqlType.BINARY: LargeBinary,
    SqlType.VARBINARY: LargeBinary,
    SqlType.LONGVARBINARY: LargeBinary,
    SqlType.BLOB: LargeBinary,
}


def type_code_to_sql(type_code: int) -> TypeEngine[Any]:
    """Convert a vendor type code back to a SQLAlchemy type.

    Unknown codes fall back to String.
    """
    return TYPE_CODE_TO_SQL.get(type_code, String)()


def sql_to_string(sql_type: TypeEngine[Any]) -> str:
    """Convert a SQLAlchemy type to its string representation for code generation."""
    match sql_type:
        case String() if sql_type.length:
            return f"{sql_type.__class__.__name__}({sql_type.length})"
        case Numeric() if sql_type.precision and sql_type.scale:
            return f"Numeric({sql_type.precision}, {sql_type.scale})"
        case Numeric() if sql_type.precision:
            return f"Numeric({sql_type.precision})"
        case _:
            return sql_type.__class__.__name__


def sql_to_python(sql_type: TypeEngine[Any]) -> TypeInfo:
    """Get the module, import name and expression of a type's Python type."""
    try:
        py_type = sql_type.python_type
    except NotImplementedError:
        return TypeInfo(module="typing", name="Any", expression="Any")

    return TypeInfo(
        module=py_type.__module__,
        name=py_type.__name__,
        expression=py_type.__name__,
    )

