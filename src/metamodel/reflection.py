"""Catalog rows gathered through SQLAlchemy reflection."""

from collections.abc import Collection, Iterator
from logging import getLogger
from pathlib import Path

from sqlalchemy import Engine, Inspector, create_engine, inspect
from sqlalchemy.engine.interfaces import (
    ReflectedColumn,
    ReflectedForeignKeyConstraint,
)

from metamodel.builder import build_model
from metamodel.errors import MalformedRowError
from metamodel.model import Model
from metamodel.names import QualifiedName
from metamodel.rows import (
    CatalogTable,
    ColumnRow,
    ForeignKeyRow,
    IndexRow,
    IndexType,
    PrimaryKeyRow,
    RuleCode,
)
from metamodel.type_conversion import sql_to_type_code

logger = getLogger(__name__)

RULE_CODES = {
    "CASCADE": RuleCode.CASCADE,
    "RESTRICT": RuleCode.RESTRICT,
    "SET NULL": RuleCode.SET_NULL,
    "NO ACTION": RuleCode.NO_ACTION,
    "SET DEFAULT": RuleCode.SET_DEFAULT,
}


def read_only_sqlite(sqlite_location: Path) -> Engine:
    """Create a read-only SQLAlchemy engine for SQLite database."""
    connection_string = f"sqlite:///{sqlite_location}?mode=ro"
    return create_engine(connection_string, connect_args={"uri": True})


def rule_code(rule: str | None) -> int:
    """Map a referential action as reported by SQLAlchemy to its rule code."""
    if rule is None:
        return RuleCode.NO_ACTION
    try:
        return RULE_CODES[" ".join(rule.upper().split())]
    except KeyError as err:
        msg = f"Unknown referential action: {rule}"
        raise MalformedRowError(msg) from err


def _column_row(
    table: QualifiedName,
    position: int,
    column: ReflectedColumn,
) -> ColumnRow:
    """Derive a column row from SQLAlchemy column info."""
    # Dialects report "auto" when they cannot tell
    auto_increment = column.get("autoincrement")
    return ColumnRow(
        table=table,
        name=column["name"],
        type_code=sql_to_type_code(column["type"]),
        ordinal_position=position,
        nullable=column.get("nullable"),
        auto_increment=auto_increment if isinstance(auto_increment, bool) else None,
        default=column.get("default"),
    )


def _foreign_key_rows(
    table: QualifiedName,
    foreign_key: ReflectedForeignKeyConstraint,
    schema: str | None,
) -> Iterator[ForeignKeyRow]:
    """Derive one row per column pair of a foreign key constraint."""
    referred_schema = foreign_key.get("referred_schema")
    pk_table = QualifiedName(
        foreign_key["referred_table"],
        schema=schema if referred_schema is None else referred_schema,
    )
    options = foreign_key.get("options", {})
    update_rule = rule_code(options.get("onupdate"))
    delete_rule = rule_code(options.get("ondelete"))

    pairs = zip(
        foreign_key["constrained_columns"],
        foreign_key["referred_columns"],
        strict=True,
    )
    for key_seq, (fk_column, pk_column) in enumerate(pairs, start=1):
        yield ForeignKeyRow(
            fk_table=table,
            fk_column=fk_column,
            pk_table=pk_table,
            pk_column=pk_column,
            key_seq=key_seq,
            fk_name=foreign_key.get("name"),
            update_rule=update_rule,
            delete_rule=delete_rule,
        )


def _index_rows(
    inspector: Inspector,
    table: QualifiedName,
    schema: str | None,
) -> Iterator[IndexRow]:
    """Derive index rows from indices and unique constraints."""
    names: set[str | None] = set()

    for index in inspector.get_indexes(table.name, schema=schema):
        columns = index["column_names"]
        if any(column is None for column in columns):
            logger.debug("Skipping expression index %r of %s", index["name"], table)
            continue
        names.add(index["name"])
        for position, column in enumerate(columns, start=1):
            yield IndexRow(
                table=table,
                name=index["name"],
                column=column,
                ordinal_position=position,
                non_unique=not index["unique"],
                index_type=IndexType.OTHER,
            )

    for constraint in inspector.get_unique_constraints(table.name, schema=schema):
        name = constraint.get("name")
        # Some dialects report the backing index of a constraint as well
        if name is not None and name in names:
            continue
        for position, column in enumerate(constraint["column_names"], start=1):
            yield IndexRow(
                table=table,
                name=name,
                column=column,
                ordinal_position=position,
                non_unique=False,
                index_type=IndexType.OTHER,
            )


def _catalog_table(
    inspector: Inspector,
    table_name: str,
    schema: str | None,
) -> CatalogTable:
    """Gather the catalog rows of one table."""
    table = QualifiedName(table_name, schema=schema)
    pk_constraint = inspector.get_pk_constraint(table_name, schema=schema)

    return CatalogTable(
        name=table,
        columns=tuple(
            _column_row(table, position, column)
            for position, column in enumerate(
                inspector.get_columns(table_name, schema=schema),
                start=1,
            )
        ),
        primary_keys=tuple(
            PrimaryKeyRow(
                table=table,
                column=column,
                key_seq=key_seq,
                name=pk_constraint.get("name"),
            )
            for key_seq, column in enumerate(
                pk_constraint.get("constrained_columns") or [],
                start=1,
            )
        ),
        foreign_keys=tuple(
            row
            for foreign_key in inspector.get_foreign_keys(table_name, schema=schema)
            for row in _foreign_key_rows(table, foreign_key, schema)
        ),
        indices=tuple(_index_rows(inspector, table, schema)),
    )


def reflect_catalog(
    engine: Engine,
    schema: str | None = None,
    include: Collection[str] | None = None,
    exclude: Collection[str] = (),
) -> list[CatalogTable]:
    """Reflect the catalog rows of the tables of a database schema.

    ``include`` limits reflection to the named tables, ``exclude`` removes
    tables from the reflected set.
    """
    inspector = inspect(engine)
    table_names = [
        name
        for name in inspector.get_table_names(schema=schema)
        if (include is None or name in include) and name not in exclude
    ]
    return [_catalog_table(inspector, name, schema) for name in sorted(table_names)]


def reflect_model(
    engine: Engine,
    schema: str | None = None,
    include: Collection[str] | None = None,
    exclude: Collection[str] = (),
) -> Model:
    """Reflect a database schema into a model."""
    return build_model(reflect_catalog(engine, schema, include, exclude))
