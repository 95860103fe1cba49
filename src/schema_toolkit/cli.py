"""Command line interface for Schema Toolkit."""

import sys
from collections.abc import Iterable
from logging import DEBUG, WARNING, basicConfig
from pathlib import Path
from typing import Literal

from cyclopts import App
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from metamodel import (
    Model,
    ModelError,
    model_to_json,
    model_to_sqlalchemy,
    read_only_sqlite,
    reflect_model,
)
from schema_toolkit.config import Settings, load_settings

app = App(help="Schema Toolkit CLI tool")

type Format = Literal["python", "json"]

console = Console()
err_console = Console(stderr=True)

# Constants
SQLITE_EXTENSIONS = {".sqlite", ".db", ".sqlite3"}


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def configure_logging(*, verbose: bool) -> None:
    """Send library log records to stderr."""
    basicConfig(
        level=DEBUG if verbose else WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def validate_database_location(database_location: Path) -> None:
    """Validate database location."""
    if not database_location.exists():
        print_error(f"Database file does not exist: {database_location}")
        sys.exit(1)


def validate_database_extension(
    database_location: Path,
    file_extensions: Iterable[str],
) -> None:
    """Validate database file extension."""
    if database_location.suffix.lower() not in file_extensions:
        print_error(
            f"Database file has invalid extension: {', '.join(file_extensions)}",
        )
        sys.exit(1)


def read_settings(config_location: Path | None) -> Settings:
    """Read settings, exiting on an unreadable config file."""
    if config_location is not None and not config_location.is_file():
        print_error(f"Config file does not exist: {config_location}")
        sys.exit(1)
    try:
        return load_settings(config_location)
    except (ValueError, OSError) as e:
        print_error(f"Invalid config file: {config_location} ({e})")
        sys.exit(1)


def build_database_model(sqlite_location: Path, settings: Settings) -> Model:
    """Reflect the model of a SQLite database, exiting on failure."""
    validate_database_location(sqlite_location)
    validate_database_extension(sqlite_location, SQLITE_EXTENSIONS)
    print_info(f"Source database: {sqlite_location}")

    engine = read_only_sqlite(sqlite_location)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=err_console,
        ) as progress:
            progress.add_task("Building schema model...", total=None)
            return reflect_model(
                engine,
                schema=settings.get("schema"),
                include=settings.get("include"),
                exclude=settings.get("exclude", ()),
            )
    except ModelError as e:
        print_error(f"Inconsistent catalog: {e}")
        sys.exit(1)
    except SQLAlchemyError as e:
        print_error(f"Failed to read database: {e}")
        sys.exit(1)
    finally:
        engine.dispose()


def format_summary_table(model: Model) -> None:
    """Format model summary as a rich table."""
    if not model.tables:
        console.print("No tables found.")
        return

    table = Table(title="Schema Model")
    table.add_column("Table", style="bold cyan")
    table.add_column("Columns", justify="right")
    table.add_column("Primary Key")
    table.add_column("Foreign Keys", justify="right")
    table.add_column("Indices", justify="right")

    for meta in model.tables:
        table.add_row(
            str(meta.name),
            str(len(meta.columns)),
            ", ".join(column.name for column in meta.primary_key_columns) or "-",
            str(len(meta.foreign_keys)),
            str(len(meta.indices)),
        )

    console.print(table)


@app.command
def model(
    sqlite_location: Path,
    fmt: Format = "python",
    *,
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Generate SQLAlchemy models or JSON from a SQLite database schema."""
    configure_logging(verbose=verbose)
    settings = read_settings(config)
    print_info(f"Output format: {fmt}")

    schema_model = build_database_model(sqlite_location, settings)

    if fmt == "python":
        base_class = settings.get("base_class", "Base")
        sys.stdout.write(model_to_sqlalchemy(schema_model, base_class=base_class))
    elif fmt == "json":
        sys.stdout.write(model_to_json(schema_model))

    print_success("Model generation completed successfully")


@app.command
def summary(
    sqlite_location: Path,
    *,
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Summarize the tables, keys and indices of a SQLite database."""
    configure_logging(verbose=verbose)
    settings = read_settings(config)
    format_summary_table(build_database_model(sqlite_location, settings))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
