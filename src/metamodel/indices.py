"""Resolution of user declared indices from catalog index fragments."""

from collections.abc import Collection, Iterable, Iterator, Sequence
from logging import getLogger

from metamodel.columns import resolve_columns
from metamodel.errors import MalformedRowError
from metamodel.grouping import group_fragments
from metamodel.model import Column, ForeignKey, Index
from metamodel.names import NameIndex, QualifiedName
from metamodel.rows import IndexRow, IndexType

logger = getLogger(__name__)


def _index_fragments(table: QualifiedName, rows: Iterable[IndexRow]) -> Iterator[IndexRow]:
    """Yield fragments of real indices, skipping table statistics rows."""
    for row in rows:
        if row.index_type == IndexType.STATISTIC:
            logger.debug("Skipping statistics row of %s", table)
            continue
        if row.column is None:
            msg = f"Index {row.name!r} of {table} has a fragment without column"
            raise MalformedRowError(msg)
        yield row


def _is_redundant(
    index: Index,
    primary_key_columns: frozenset[str],
    foreign_key_columns: Collection[frozenset[str]],
) -> bool:
    """Check whether an index only backs the primary key or a foreign key."""
    columns = frozenset(column.name for column in index.columns)
    if index.unique and columns == primary_key_columns:
        return True
    return columns in foreign_key_columns


def resolve_indices(
    table: QualifiedName,
    rows: Iterable[IndexRow],
    columns: NameIndex[str, Column],
    primary_key_columns: Collection[str],
    foreign_keys: Sequence[ForeignKey],
) -> tuple[Index, ...]:
    """Resolve the indices of a table.

    Indices created by the database to enforce the primary key or a foreign
    key are left out, as are table statistics rows.
    """

    def build(name: str | None, fragments: Sequence[IndexRow]) -> Index:
        return Index(
            name=name,
            table=table,
            columns=resolve_columns(
                columns,
                (f.column for f in fragments),
                f"Index {name!r} of {table}",
            ),
            unique=not fragments[0].non_unique,
        )

    indices = group_fragments(
        _index_fragments(table, rows),
        key=lambda row: row.name,
        position=lambda row: row.ordinal_position,
        build=build,
        order=lambda name: name or "",
    )

    pk_columns = frozenset(primary_key_columns)
    fk_columns = {
        frozenset(column.name for column in fk.referencing_columns)
        for fk in foreign_keys
    }

    kept: list[Index] = []
    for index in indices:
        if _is_redundant(index, pk_columns, fk_columns):
            logger.debug("Leaving out index %r of %s", index.name, table)
            continue
        kept.append(index)
    return tuple(kept)
