"""Resolution of primary and foreign keys from catalog key fragments."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from itertools import count
from logging import getLogger

from metamodel.columns import resolve_columns
from metamodel.errors import ConsistencyError, MalformedRowError
from metamodel.grouping import group_fragments
from metamodel.model import Column, ForeignKey, ForeignKeyAction, PrimaryKey
from metamodel.names import NameIndex, QualifiedName
from metamodel.rows import ForeignKeyRow, PrimaryKeyRow, RuleCode

logger = getLogger(__name__)

RULE_ACTIONS = {
    RuleCode.CASCADE: ForeignKeyAction.CASCADE,
    RuleCode.RESTRICT: ForeignKeyAction.RESTRICT,
    RuleCode.SET_NULL: ForeignKeyAction.SET_NULL,
    RuleCode.NO_ACTION: ForeignKeyAction.NO_ACTION,
    RuleCode.SET_DEFAULT: ForeignKeyAction.SET_DEFAULT,
}

type ForeignKeyGroup = tuple[QualifiedName, str | None, str | None, QualifiedName]


class NameGenerator:
    """Synthesizes names for unnamed keys within one model build."""

    def __init__(self) -> None:
        """Start numbering at one."""
        self._counter = count(1)

    def __call__(self, prefix: str, table: QualifiedName) -> str:
        """Return a fresh name such as ``pk_orders_1``."""
        return f"{prefix}_{table.name}_{next(self._counter)}"


def primary_key_fragments(rows: Iterable[PrimaryKeyRow]) -> list[PrimaryKeyRow]:
    """Order the primary key fragments of one table by key sequence.

    All fragments belong to the table being built, however their table name
    is cased.
    """
    return sorted(rows, key=lambda row: row.key_seq)


def resolve_primary_key(
    table: QualifiedName,
    fragments: Sequence[PrimaryKeyRow],
    columns: NameIndex[str, Column],
    names: NameGenerator,
) -> PrimaryKey | None:
    """Return the primary key entity of a table, if it needs one.

    Keys of zero or one column produce no entity; a single column key is
    represented by the PrimaryKeyOption of its column instead.
    """
    if len(fragments) <= 1:
        return None

    name = next((f.name for f in fragments if f.name), None) or names("pk", table)
    return PrimaryKey(
        name=name,
        table=table,
        columns=resolve_columns(
            columns,
            (f.column for f in fragments),
            f"Primary key {name!r} of {table}",
        ),
    )


def foreign_key_action(code: int) -> ForeignKeyAction:
    """Map an update or delete rule code to its action."""
    try:
        return RULE_ACTIONS[RuleCode(code)]
    except ValueError as err:
        msg = f"Unknown foreign key rule code: {code}"
        raise MalformedRowError(msg) from err


def _included_fragments(
    rows: Iterable[ForeignKeyRow],
    tables: NameIndex[QualifiedName, QualifiedName],
) -> Iterable[ForeignKeyRow]:
    """Resolve table names of fragments, dropping keys leaving the table set."""
    dropped: set[tuple[QualifiedName, str | None, QualifiedName]] = set()

    for row in rows:
        if (fk_table := tables.get(row.fk_table)) is None:
            msg = f"Foreign key {row.fk_name!r} belongs to unknown table {row.fk_table}"
            raise ConsistencyError(msg)

        if (pk_table := tables.get(row.pk_table)) is None:
            if (key := (fk_table, row.fk_name, row.pk_table)) not in dropped:
                dropped.add(key)
                logger.warning(
                    "Dropping foreign key %r of %s: %s is not included",
                    row.fk_name,
                    fk_table,
                    row.pk_table,
                )
            continue

        yield row._replace(fk_table=fk_table, pk_table=pk_table)


def resolve_foreign_keys(
    rows: Iterable[ForeignKeyRow],
    tables: NameIndex[QualifiedName, QualifiedName],
    columns: Mapping[QualifiedName, NameIndex[str, Column]],
) -> dict[QualifiedName, list[ForeignKey]]:
    """Resolve the foreign keys of all tables, keyed by referencing table.

    Needs the columns of every table, since keys reference columns of the
    referenced table as well as their own.
    """

    def build(_key: ForeignKeyGroup, fragments: Sequence[ForeignKeyRow]) -> ForeignKey:
        first = fragments[0]
        owner = f"Foreign key {first.fk_name!r} of {first.fk_table}"
        referencing = resolve_columns(
            columns[first.fk_table],
            (f.fk_column for f in fragments),
            owner,
        )
        referenced = resolve_columns(
            columns[first.pk_table],
            (f.pk_column for f in fragments),
            owner,
        )
        return ForeignKey(
            name=first.fk_name,
            referencing_table=first.fk_table,
            referencing_columns=referencing,
            referenced_table=first.pk_table,
            referenced_columns=referenced,
            on_update=foreign_key_action(first.update_rule),
            on_delete=foreign_key_action(first.delete_rule),
        )

    foreign_keys = group_fragments(
        _included_fragments(rows, tables),
        key=lambda row: (row.pk_table, row.fk_name, row.pk_name, row.fk_table),
        position=lambda row: row.key_seq,
        build=build,
        order=lambda key: (
            key[0].sort_key,
            key[1] or "",
            key[2] or "",
            key[3].sort_key,
        ),
        tiebreak=lambda row: (row.fk_column or "", row.pk_column or ""),
    )

    by_table: defaultdict[QualifiedName, list[ForeignKey]] = defaultdict(list)
    for foreign_key in foreign_keys:
        by_table[foreign_key.referencing_table].append(foreign_key)
    return dict(by_table)
