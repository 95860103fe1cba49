"""Immutable relational schema model built from database catalog metadata."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum, auto
from functools import cached_property

from metamodel.errors import ConsistencyError
from metamodel.names import QualifiedName

type DefaultValue = int | float | str | None


class ForeignKeyAction(StrEnum):
    """Referential action taken on update or delete of a referenced row."""

    CASCADE = auto()
    RESTRICT = auto()
    NO_ACTION = auto()
    SET_NULL = auto()
    SET_DEFAULT = auto()

    @property
    def sql(self) -> str:
        """SQL spelling of the action, e.g. ``SET NULL``."""
        return self.replace("_", " ").upper()


@dataclass(frozen=True)
class AutoInc:
    """Column values are generated by the database."""


@dataclass(frozen=True)
class Default:
    """Column default value."""

    value: DefaultValue


@dataclass(frozen=True)
class PrimaryKeyOption:
    """Column is the sole column of its table's primary key."""


type ColumnOption = AutoInc | Default | PrimaryKeyOption


@dataclass(frozen=True)
class Column:
    """A table column."""

    name: str
    table: QualifiedName
    type_code: int
    nullable: bool = True
    options: frozenset[ColumnOption] = frozenset()

    @property
    def auto_inc(self) -> bool:
        """Whether the column carries the AutoInc option."""
        return AutoInc() in self.options

    @property
    def primary_key(self) -> bool:
        """Whether the column is a single-column primary key."""
        return PrimaryKeyOption() in self.options

    @property
    def default(self) -> Default | None:
        """Default option of the column, if any."""
        return next((o for o in self.options if isinstance(o, Default)), None)


@dataclass(frozen=True)
class PrimaryKey:
    """Composite primary key (two or more columns)."""

    name: str | None
    table: QualifiedName
    columns: tuple[Column, ...]


@dataclass(frozen=True)
class ForeignKey:
    """Foreign key; columns correspond position for position."""

    name: str | None
    referencing_table: QualifiedName
    referencing_columns: tuple[Column, ...]
    referenced_table: QualifiedName
    referenced_columns: tuple[Column, ...]
    on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION


@dataclass(frozen=True)
class Index:
    """User declared index."""

    name: str | None
    table: QualifiedName
    columns: tuple[Column, ...]
    unique: bool = False


@dataclass(frozen=True)
class Table:
    """A table with its columns, keys and indices."""

    name: QualifiedName
    columns: tuple[Column, ...]
    primary_key: PrimaryKey | None = None
    foreign_keys: tuple[ForeignKey, ...] = ()
    indices: tuple[Index, ...] = ()

    @cached_property
    def columns_by_name(self) -> Mapping[str, Column]:
        """Columns indexed by name."""
        return {column.name: column for column in self.columns}

    def column(self, name: str) -> Column:
        """Return the column with the given name."""
        return self.columns_by_name[name]

    @property
    def primary_key_columns(self) -> tuple[Column, ...]:
        """Primary key columns, whichever way the key is represented."""
        if self.primary_key is not None:
            return self.primary_key.columns
        return tuple(column for column in self.columns if column.primary_key)


@dataclass(frozen=True)
class Model:
    """Tables of a database, sorted by name."""

    tables: tuple[Table, ...] = ()

    @cached_property
    def tables_by_name(self) -> Mapping[QualifiedName, Table]:
        """Tables indexed by qualified name."""
        return {table.name: table for table in self.tables}

    def table(self, name: QualifiedName | str) -> Table:
        """Return the table with the given name."""
        if isinstance(name, str):
            name = QualifiedName(name)
        return self.tables_by_name[name]

    def assert_consistency(self) -> None:
        """Check that every cross reference points into the model.

        Raises ConsistencyError on the first violation found.
        """
        if len(self.tables_by_name) != len(self.tables):
            msg = "Model contains duplicate table names"
            raise ConsistencyError(msg)

        for table in self.tables:
            _check_table(table, self.tables_by_name)


def _check_members(table: Table, columns: Iterable[Column], owner: str) -> None:
    """Check that columns are members of the table's column sequence."""
    for column in columns:
        if table.columns_by_name.get(column.name) != column:
            msg = f"{owner} references column {column.name!r} not in table {table.name}"
            raise ConsistencyError(msg)


def _check_table(table: Table, tables: Mapping[QualifiedName, Table]) -> None:
    names = [column.name for column in table.columns]
    if len(set(names)) != len(names):
        msg = f"Table {table.name} has duplicate column names"
        raise ConsistencyError(msg)
    if any(column.table != table.name for column in table.columns):
        msg = f"Table {table.name} holds a column of another table"
        raise ConsistencyError(msg)

    if (pk := table.primary_key) is not None:
        if pk.table != table.name or len(pk.columns) < 2:  # noqa: PLR2004
            msg = f"Primary key {pk.name!r} of {table.name} is malformed"
            raise ConsistencyError(msg)
        _check_members(table, pk.columns, f"Primary key {pk.name!r}")

    for fk in table.foreign_keys:
        owner = f"Foreign key {fk.name!r} of {table.name}"
        if fk.referencing_table != table.name:
            msg = f"{owner} is owned by {fk.referencing_table}"
            raise ConsistencyError(msg)
        if not fk.referencing_columns or len(fk.referencing_columns) != len(
            fk.referenced_columns,
        ):
            msg = f"{owner} has mismatched column counts"
            raise ConsistencyError(msg)
        _check_members(table, fk.referencing_columns, owner)
        if (target := tables.get(fk.referenced_table)) is None:
            msg = f"{owner} references missing table {fk.referenced_table}"
            raise ConsistencyError(msg)
        _check_members(target, fk.referenced_columns, owner)

    for index in table.indices:
        if index.table != table.name:
            msg = f"Index {index.name!r} is not owned by {table.name}"
            raise ConsistencyError(msg)
        _check_members(table, index.columns, f"Index {index.name!r}")
