"""SQLAlchemy declarative code generation from a schema model."""

import keyword
from collections import defaultdict
from collections.abc import Callable
from re import sub
from typing import Any, NamedTuple

from sqlalchemy.types import TypeEngine

from metamodel.model import Column, ForeignKey, ForeignKeyAction, Index, Model, Table
from metamodel.type_conversion import sql_to_python, sql_to_string, type_code_to_sql

type Imports = dict[str, set[str]]
type TypeMapper = Callable[[int], TypeEngine[Any]]


def pascal_case(name: str) -> str:
    """Convert name to PascalCase."""
    return "".join(word[0].upper() + word[1:] for word in name.split("_") if word)


def snake_case(name: str) -> str:
    """Convert name to snake_case."""
    return sub("([a-z0-9])([A-Z])|([A-Z])([A-Z][a-z])", r"\1\3_\2\4", name).lower()


class Naming(NamedTuple):
    """Naming strategy mapping database names to Python identifiers."""

    class_name: Callable[[str], str] = pascal_case
    attribute_name: Callable[[str], str] = snake_case


def _quote_list(names: list[str]) -> str:
    return "[" + ", ".join(f'"{name}"' for name in names) + "]"


def _target(column: Column) -> str:
    """Render the dotted target of a foreign key column."""
    parts = (column.table.schema, column.table.name, column.name)
    return ".".join(part for part in parts if part)


def render_server_default(column: Column, imports: Imports) -> str | None:
    """Render the server_default argument of a column, if it has a default."""
    if (default := column.default) is None or default.value is None:
        return None
    if isinstance(default.value, str):
        return f"server_default={default.value!r}"
    imports["sqlalchemy"].add("text")
    return f'server_default=text("{default.value}")'


def render_foreign_key(fk: ForeignKey, imports: Imports) -> str:
    """Render a ForeignKeyConstraint from a foreign key."""
    imports["sqlalchemy"].add("ForeignKeyConstraint")
    args = [
        _quote_list([column.name for column in fk.referencing_columns]),
        _quote_list([_target(column) for column in fk.referenced_columns]),
    ]
    if fk.name:
        args.append(f'name="{fk.name}"')
    if fk.on_update is not ForeignKeyAction.NO_ACTION:
        args.append(f'onupdate="{fk.on_update.sql}"')
    if fk.on_delete is not ForeignKeyAction.NO_ACTION:
        args.append(f'ondelete="{fk.on_delete.sql}"')
    return f"ForeignKeyConstraint({', '.join(args)})"


def render_index(index: Index, imports: Imports) -> str:
    """Render an Index from an index."""
    imports["sqlalchemy"].add("Index")
    args = [f'"{index.name}"' if index.name else "None"]
    args.extend(f'"{column.name}"' for column in index.columns)
    if index.unique:
        args.append("unique=True")
    return f"Index({', '.join(args)})"


def constraint_arguments(table: Table, imports: Imports) -> list[str]:
    """Render the table level constraints of a table."""
    arguments: list[str] = []
    if (pk := table.primary_key) is not None:
        imports["sqlalchemy"].add("PrimaryKeyConstraint")
        columns = ", ".join(f'"{column.name}"' for column in pk.columns)
        name = f', name="{pk.name}"' if pk.name else ""
        arguments.append(f"PrimaryKeyConstraint({columns}{name})")
    arguments.extend(render_foreign_key(fk, imports) for fk in table.foreign_keys)
    arguments.extend(render_index(index, imports) for index in table.indices)
    return arguments


def generate_column_definition(
    column: Column,
    naming: Naming,
    type_mapper: TypeMapper,
    imports: Imports,
) -> str:
    """Generate mapped_column definition for a column."""
    sql_type = type_mapper(column.type_code)
    type_info = sql_to_python(sql_type)
    if type_info.module != "builtins":
        imports[type_info.module].add(type_info.name)

    python_type = (
        f"{type_info.expression} | None" if column.nullable else type_info.expression
    )

    imports["sqlalchemy"].add(sql_type.__class__.__name__)
    args = [f'"{column.name}"', sql_to_string(sql_type)]

    if column.primary_key:
        args.append("primary_key=True")
    if column.auto_inc:
        args.append("autoincrement=True")
    if server_default := render_server_default(column, imports):
        args.append(server_default)

    imports["sqlalchemy.orm"].update(("Mapped", "mapped_column"))

    attribute = naming.attribute_name(column.name)
    if attribute in keyword.kwlist:
        attribute = f"{attribute}_"
    return f"\t{attribute}: Mapped[{python_type}] = mapped_column({', '.join(args)})"


def generate_class_definition(
    table: Table,
    base_class: str,
    naming: Naming,
    type_mapper: TypeMapper,
    imports: Imports,
) -> str:
    """Generate complete SQLAlchemy class definition for a table."""
    lines = [
        f"class {naming.class_name(table.name.name)}({base_class}):",
        f'\t"""Auto-generated model for the {table.name} table."""',
        "",
        f'\t__tablename__ = "{table.name.name}"',
    ]

    arguments = constraint_arguments(table, imports)
    if table.name.schema:
        arguments.append(f'{{"schema": "{table.name.schema}"}}')
    if arguments:
        lines.append("\t__table_args__ = (")
        lines.extend(f"\t\t{argument}," for argument in arguments)
        lines.append("\t)")

    lines.append("")
    lines.extend(
        generate_column_definition(column, naming, type_mapper, imports)
        for column in table.columns
    )
    return "\n".join(lines)


def generate_table_definition(
    table: Table,
    base_class: str,
    naming: Naming,
    type_mapper: TypeMapper,
    imports: Imports,
) -> str:
    """Generate SQLAlchemy Table definition for tables without primary keys."""
    args = [
        f'"{table.name.name}"',
        f"{base_class}.metadata",
    ]

    for column in table.columns:
        sql_type = type_mapper(column.type_code)
        imports["sqlalchemy"].update(("Column", sql_type.__class__.__name__))
        column_args = [f'"{column.name}"', sql_to_string(sql_type)]
        column_args.append(f"nullable={column.nullable}")
        if server_default := render_server_default(column, imports):
            column_args.append(server_default)
        args.append(f"Column({', '.join(column_args)})")

    args.extend(constraint_arguments(table, imports))
    if table.name.schema:
        args.append(f'schema="{table.name.schema}"')

    imports["sqlalchemy"].add("Table")
    args_str = ",\n\t".join(args)

    return f"{naming.class_name(table.name.name)} = Table(\n\t{args_str},\n)"


def generate_imports(imports: Imports) -> str:
    """Generate import statements from collected imports."""
    lines = [
        f"from {module} import {', '.join(sorted(names))}"
        for module, names in imports.items()
        if names
    ]
    return "\n".join(lines)


def generate_base_class(base_name: str) -> str:
    """Generate the base class definition."""
    return f'''class {base_name}(DeclarativeBase):
\t"""Base class for all generated models."""'''


def model_to_sqlalchemy(
    model: Model,
    naming: Naming | None = None,
    type_mapper: TypeMapper = type_code_to_sql,
    base_class: str = "Base",
) -> str:
    """Generate SQLAlchemy models from a schema model."""
    naming = naming or Naming()
    imports: Imports = defaultdict(set)
    imports["__future__"].add("annotations")
    imports["sqlalchemy.orm"].add("DeclarativeBase")

    # Generate models first to populate imports
    models = [
        (
            generate_class_definition(table, base_class, naming, type_mapper, imports)
            if table.primary_key_columns
            else generate_table_definition(
                table,
                base_class,
                naming,
                type_mapper,
                imports,
            )
        )
        for table in model.tables
    ]

    parts = (
        '"""SQLAlchemy models generated from database catalog metadata."""',
        "",
        generate_imports(imports),
        "",
        "",
        generate_base_class(base_class),
        *(f"\n\n{definition}" for definition in models),
    )

    return "\n".join(parts) + "\n"
