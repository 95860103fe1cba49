"""Relational schema model built from database catalog metadata."""

from metamodel.builder import build_model
from metamodel.errors import ConsistencyError, MalformedRowError, ModelError
from metamodel.json_export import model_to_dict, model_to_json
from metamodel.model import (
    AutoInc,
    Column,
    Default,
    ForeignKey,
    ForeignKeyAction,
    Index,
    Model,
    PrimaryKey,
    PrimaryKeyOption,
    Table,
)
from metamodel.names import QualifiedName
from metamodel.reflection import read_only_sqlite, reflect_catalog, reflect_model
from metamodel.rows import (
    CatalogTable,
    ColumnRow,
    ForeignKeyRow,
    IndexRow,
    IndexType,
    PrimaryKeyRow,
    RuleCode,
)
from metamodel.sqlalchemy_export import Naming, model_to_sqlalchemy

__all__ = [
    "AutoInc",
    "CatalogTable",
    "Column",
    "ColumnRow",
    "ConsistencyError",
    "Default",
    "ForeignKey",
    "ForeignKeyAction",
    "ForeignKeyRow",
    "Index",
    "IndexRow",
    "IndexType",
    "MalformedRowError",
    "Model",
    "ModelError",
    "Naming",
    "PrimaryKey",
    "PrimaryKeyOption",
    "PrimaryKeyRow",
    "QualifiedName",
    "RuleCode",
    "Table",
    "build_model",
    "model_to_dict",
    "model_to_json",
    "model_to_sqlalchemy",
    "read_only_sqlite",
    "reflect_catalog",
    "reflect_model",
]
