"""Fixed-shape records for the raw rows of the database catalog.

Each record mirrors one row of a catalog view: one row per column, one row
per column participating in a primary key, foreign key or index. Codes use
the JDBC ``DatabaseMetaData`` numbering, which most drivers report.
"""

from enum import IntEnum
from typing import NamedTuple

from metamodel.names import QualifiedName


class RuleCode(IntEnum):
    """Update and delete rule codes of imported keys."""

    CASCADE = 0
    RESTRICT = 1
    SET_NULL = 2
    NO_ACTION = 3
    SET_DEFAULT = 4


class IndexType(IntEnum):
    """Index type codes of index info rows."""

    STATISTIC = 0
    CLUSTERED = 1
    HASHED = 2
    OTHER = 3


class ColumnRow(NamedTuple):
    """One column of a table."""

    table: QualifiedName
    name: str
    type_code: int
    ordinal_position: int
    nullable: bool | None = None
    auto_increment: bool | None = None
    default: str | None = None


class PrimaryKeyRow(NamedTuple):
    """One column of a primary key."""

    table: QualifiedName
    column: str
    key_seq: int
    name: str | None = None


class ForeignKeyRow(NamedTuple):
    """One referencing/referenced column pair of a foreign key."""

    fk_table: QualifiedName
    fk_column: str
    pk_table: QualifiedName
    pk_column: str
    key_seq: int
    fk_name: str | None = None
    pk_name: str | None = None
    update_rule: int = RuleCode.NO_ACTION
    delete_rule: int = RuleCode.NO_ACTION


class IndexRow(NamedTuple):
    """One column of an index, or a table statistics pseudo row."""

    table: QualifiedName
    name: str | None
    column: str | None
    ordinal_position: int
    non_unique: bool = True
    index_type: int = IndexType.OTHER


class CatalogTable(NamedTuple):
    """All catalog rows describing a single table."""

    name: QualifiedName
    columns: tuple[ColumnRow, ...] = ()
    primary_keys: tuple[PrimaryKeyRow, ...] = ()
    foreign_keys: tuple[ForeignKeyRow, ...] = ()
    indices: tuple[IndexRow, ...] = ()
