"""JSON export of schema models."""

import json
from typing import Any, TypedDict

from metamodel.model import (
    Column,
    ForeignKey,
    Index,
    Model,
    PrimaryKey,
    Table,
)
from metamodel.names import QualifiedName


class ColumnJson(TypedDict):
    """Serialized column."""

    name: str
    type_code: int
    nullable: bool
    auto_inc: bool
    primary_key: bool
    default: Any


class TableJson(TypedDict):
    """Serialized table; keys and indices reference columns by name."""

    name: str
    schema: str | None
    catalog: str | None
    columns: list[ColumnJson]
    primary_key: dict[str, Any] | None
    foreign_keys: list[dict[str, Any]]
    indices: list[dict[str, Any]]


class ModelJson(TypedDict):
    """Serialized model."""

    tables: list[TableJson]


def _names(columns: tuple[Column, ...]) -> list[str]:
    """Names of columns in key or index order."""
    return [column.name for column in columns]


def _table_ref(name: QualifiedName) -> dict[str, str | None]:
    """Qualified table name as a JSON object."""
    return {"name": name.name, "schema": name.schema, "catalog": name.catalog}


def _column(column: Column) -> ColumnJson:
    """Column with its options flattened into fields."""
    return {
        "name": column.name,
        "type_code": column.type_code,
        "nullable": column.nullable,
        "auto_inc": column.auto_inc,
        "primary_key": column.primary_key,
        "default": column.default.value if column.default else None,
    }


def _primary_key(pk: PrimaryKey | None) -> dict[str, Any] | None:
    """Primary key entity, or None for tables without a composite key."""
    if pk is None:
        return None
    return {"name": pk.name, "columns": _names(pk.columns)}


def _foreign_key(fk: ForeignKey) -> dict[str, Any]:
    """Foreign key with actions given by their enum values."""
    return {
        "name": fk.name,
        "columns": _names(fk.referencing_columns),
        "referenced_table": _table_ref(fk.referenced_table),
        "referenced_columns": _names(fk.referenced_columns),
        "on_update": fk.on_update.value,
        "on_delete": fk.on_delete.value,
    }


def _index(index: Index) -> dict[str, Any]:
    """Index with its columns in declared order."""
    return {"name": index.name, "columns": _names(index.columns), "unique": index.unique}


def _table(table: Table) -> TableJson:
    """Table with its columns, keys and indices."""
    return {
        "name": table.name.name,
        "schema": table.name.schema,
        "catalog": table.name.catalog,
        "columns": [_column(column) for column in table.columns],
        "primary_key": _primary_key(table.primary_key),
        "foreign_keys": [_foreign_key(fk) for fk in table.foreign_keys],
        "indices": [_index(index) for index in table.indices],
    }


def model_to_dict(model: Model) -> ModelJson:
    """Convert a model to JSON compatible data."""
    return {"tables": [_table(table) for table in model.tables]}


def model_to_json(model: Model, indent: int | None = 2) -> str:
    """Serialize a model to JSON."""
    return json.dumps(model_to_dict(model), indent=indent)
