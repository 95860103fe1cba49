"""Assembly of the schema model from a snapshot of catalog rows."""

from collections.abc import Iterable, Sequence
from itertools import chain
from logging import getLogger

from metamodel.columns import build_columns, column_index
from metamodel.errors import ConsistencyError
from metamodel.indices import resolve_indices
from metamodel.keys import (
    NameGenerator,
    primary_key_fragments,
    resolve_foreign_keys,
    resolve_primary_key,
)
from metamodel.model import Column, Model, PrimaryKey, Table
from metamodel.names import NameIndex, QualifiedName
from metamodel.rows import CatalogTable, ColumnRow, PrimaryKeyRow

logger = getLogger(__name__)


def _primary_key_columns(
    table: CatalogTable,
    fragments: Sequence[PrimaryKeyRow],
) -> list[str]:
    """Return the declared names of the primary key columns of a table."""
    rows: NameIndex[str, ColumnRow] = NameIndex(
        ((row.name, row) for row in table.columns),
        str.casefold,
    )
    names: list[str] = []
    for fragment in fragments:
        if (row := rows.get(fragment.column)) is None:
            msg = f"Primary key of {table.name} references column {fragment.column!r}"
            raise ConsistencyError(msg)
        names.append(row.name)
    return names


def build_model(catalog: Iterable[CatalogTable]) -> Model:
    """Build a consistent model from the catalog rows of the included tables.

    Foreign keys referencing tables outside the catalog are left out. Raises
    ConsistencyError or MalformedRowError when the rows do not describe a
    consistent schema; no partial model is returned.
    """
    tables = sorted(catalog, key=lambda table: table.name.sort_key)
    table_names = NameIndex(((t.name, t.name) for t in tables), QualifiedName.casefold)
    names = NameGenerator()

    # Columns and primary keys of every table are needed before foreign keys
    columns: dict[QualifiedName, tuple[Column, ...]] = {}
    columns_by_name: dict[QualifiedName, NameIndex[str, Column]] = {}
    pk_columns: dict[QualifiedName, list[str]] = {}
    primary_keys: dict[QualifiedName, PrimaryKey | None] = {}

    for table in tables:
        fragments = primary_key_fragments(table.primary_keys)
        pk_columns[table.name] = _primary_key_columns(table, fragments)
        columns[table.name] = build_columns(
            table.name,
            table.columns,
            pk_columns[table.name],
        )
        columns_by_name[table.name] = column_index(columns[table.name])
        primary_keys[table.name] = resolve_primary_key(
            table.name,
            fragments,
            columns_by_name[table.name],
            names,
        )

    foreign_keys = resolve_foreign_keys(
        chain.from_iterable(table.foreign_keys for table in tables),
        table_names,
        columns_by_name,
    )

    model = Model(
        tuple(
            Table(
                name=table.name,
                columns=columns[table.name],
                primary_key=primary_keys[table.name],
                foreign_keys=tuple(foreign_keys.get(table.name, ())),
                indices=resolve_indices(
                    table.name,
                    table.indices,
                    columns_by_name[table.name],
                    pk_columns[table.name],
                    foreign_keys.get(table.name, ()),
                ),
            )
            for table in tables
        ),
    )
    model.assert_consistency()

    logger.info(
        "Built model of %d tables, %d foreign keys",
        len(model.tables),
        sum(len(table.foreign_keys) for table in model.tables),
    )
    return model
