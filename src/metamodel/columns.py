"""Build model columns from catalog column rows."""

import re
from collections.abc import Collection, Iterable
from logging import getLogger

from metamodel.errors import ConsistencyError, MalformedRowError
from metamodel.model import (
    AutoInc,
    Column,
    ColumnOption,
    Default,
    DefaultValue,
    PrimaryKeyOption,
)
from metamodel.names import NameIndex, QualifiedName
from metamodel.rows import ColumnRow

logger = getLogger(__name__)

INT_VALUE = re.compile(r"-?\d+")
DECIMAL_VALUE = re.compile(r"-?(\d+\.\d*|\.\d+)")
STRING_VALUE = re.compile(r"'((?:[^']|'')*)'", re.DOTALL)
NULL_VALUE = "null"

_UNPARSED = object()


def _strip_parentheses(literal: str) -> str:
    """Remove wrapping parentheses, e.g. ``((0))`` -> ``0``."""
    literal = literal.strip()
    while literal.startswith("(") and literal.endswith(")"):
        literal = literal[1:-1].strip()
    return literal


def parse_default(literal: str) -> DefaultValue | object:
    """Parse a catalog default literal.

    Returns the parsed value, None for ``NULL`` and a sentinel for any other
    expression (function calls, vendor keywords), which are not represented.

    Examples:
        "42" -> 42
        "-1.5" -> -1.5
        "'it''s'" -> "it's"
        "NULL" -> None

    """
    value = _strip_parentheses(literal)
    if INT_VALUE.fullmatch(value):
        return int(value)
    if DECIMAL_VALUE.fullmatch(value):
        return float(value)
    if match := STRING_VALUE.fullmatch(value):
        return match[1].replace("''", "'")
    if value.lower() == NULL_VALUE:
        return None
    return _UNPARSED


def column_options(
    row: ColumnRow,
    primary_key_columns: Collection[str],
) -> frozenset[ColumnOption]:
    """Derive the column options of a column row."""
    options: set[ColumnOption] = set()

    if row.auto_increment:
        options.add(AutoInc())

    if row.default is not None:
        match parse_default(row.default):
            case None:
                pass
            case value if value is _UNPARSED:
                logger.debug(
                    "Dropping default %r of column %s.%s",
                    row.default,
                    row.table,
                    row.name,
                )
            case value:
                options.add(Default(value))  # pyright: ignore[reportArgumentType]

    # Single column primary keys are carried by the column itself
    if len(primary_key_columns) == 1 and row.name in primary_key_columns:
        options.add(PrimaryKeyOption())

    return frozenset(options)


def build_column(
    table: QualifiedName,
    row: ColumnRow,
    primary_key_columns: Collection[str],
) -> Column:
    """Build a column from its catalog row.

    ``primary_key_columns`` holds the names of every primary key column of the
    table, since the primary key option depends on the key's cardinality.
    """
    if not row.name:
        msg = f"Column row of table {table} has no column name"
        raise MalformedRowError(msg)

    return Column(
        name=row.name,
        table=table,
        type_code=row.type_code,
        nullable=True if row.nullable is None else row.nullable,
        options=column_options(row, primary_key_columns),
    )


def build_columns(
    table: QualifiedName,
    rows: Collection[ColumnRow],
    primary_key_columns: Collection[str],
) -> tuple[Column, ...]:
    """Build the columns of a table in declared ordinal order."""
    ordered = sorted(rows, key=lambda row: row.ordinal_position)
    return tuple(build_column(table, row, primary_key_columns) for row in ordered)


def column_index(columns: Iterable[Column]) -> NameIndex[str, Column]:
    """Index columns by name, tolerating differently cased references."""
    return NameIndex(((column.name, column) for column in columns), str.casefold)


def resolve_columns(
    columns: NameIndex[str, Column],
    names: Iterable[str | None],
    owner: str,
) -> tuple[Column, ...]:
    """Resolve column names referenced by a key or index."""
    resolved: list[Column] = []
    for name in names:
        if name is None or (column := columns.get(name)) is None:
            msg = f"{owner} references unknown column {name!r}"
            raise ConsistencyError(msg)
        resolved.append(column)
    return tuple(resolved)
