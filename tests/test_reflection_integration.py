"""Integration tests for building models from reflected SQLite databases."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from sqlite3 import connect

import pytest
from sqlalchemy import Engine

from metamodel import (
    AutoInc,
    Default,
    ForeignKeyAction,
    Model,
    PrimaryKeyOption,
    QualifiedName,
    read_only_sqlite,
    reflect_catalog,
    reflect_model,
)
from metamodel.reflection import rule_code
from metamodel.rows import RuleCode
from metamodel.type_conversion import SqlType


@pytest.fixture(name="shop_database")
def shop_sample_database() -> Generator[Path]:
    """Create a temporary SQLite database of a small shop."""
    with tempfile.NamedTemporaryFile(suffix=".sqlite", delete=False) as tmp:
        db_path = Path(tmp.name)

    conn = connect(db_path)
    conn.executescript(
        """
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            email TEXT
        );
        CREATE TABLE warehouses (
            id INTEGER PRIMARY KEY,
            city TEXT
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL
                REFERENCES customers (id) ON DELETE CASCADE,
            status TEXT DEFAULT 'new',
            total NUMERIC(10, 2) DEFAULT 0,
            warehouse_id INTEGER REFERENCES warehouses (id)
        );
        CREATE INDEX ix_orders_status ON orders (status);
        CREATE INDEX ix_orders_customer ON orders (customer_id);
        CREATE TABLE order_lines (
            order_id INTEGER NOT NULL,
            line_no INTEGER NOT NULL,
            quantity INTEGER,
            PRIMARY KEY (order_id, line_no),
            FOREIGN KEY (order_id) REFERENCES orders (id)
        );
        CREATE TABLE messages (
            id INTEGER PRIMARY KEY,
            sender_id INTEGER REFERENCES customers (id),
            recipient_id INTEGER REFERENCES customers (id)
        );
        CREATE TABLE audit_log (
            event TEXT,
            created TEXT DEFAULT CURRENT_TIMESTAMP
        );
        """,
    )
    conn.commit()
    conn.close()

    yield db_path

    # Cleanup
    db_path.unlink()


@pytest.fixture(name="engine")
def shop_engine(shop_database: Path) -> Generator[Engine]:
    """Read-only engine for the shop database."""
    engine = read_only_sqlite(shop_database)
    yield engine
    engine.dispose()


@pytest.fixture(name="shop")
def shop_model(engine: Engine) -> Model:
    """Model of the shop database without warehouses."""
    return reflect_model(engine, exclude=["warehouses"])


def test_tables_sorted_and_filtered(shop: Model) -> None:
    """Test that excluded tables are absent and tables are sorted."""
    assert [table.name.name for table in shop.tables] == [
        "audit_log",
        "customers",
        "messages",
        "order_lines",
        "orders",
    ]


def test_include_limits_reflection(engine: Engine) -> None:
    """Test that only included tables are reflected."""
    catalog = reflect_catalog(engine, include={"customers", "orders"})

    assert [table.name for table in catalog] == [
        QualifiedName("customers"),
        QualifiedName("orders"),
    ]


def test_columns_reflected(shop: Model) -> None:
    """Test that column rows are converted with types, nullability and defaults."""
    orders = shop.table("orders")

    assert [column.name for column in orders.columns] == [
        "id",
        "customer_id",
        "status",
        "total",
        "warehouse_id",
    ]
    assert orders.column("customer_id").type_code == SqlType.INTEGER
    assert orders.column("status").type_code == SqlType.LONGVARCHAR
    assert orders.column("total").type_code == SqlType.NUMERIC
    assert shop.table("customers").column("name").type_code == SqlType.VARCHAR

    assert not orders.column("customer_id").nullable
    assert orders.column("status").nullable

    assert orders.column("status").default == Default("new")
    assert orders.column("total").default == Default(0)
    assert shop.table("audit_log").column("created").default is None


def test_single_column_primary_key(shop: Model) -> None:
    """Test that an integer primary key is a column option."""
    orders = shop.table("orders")

    assert orders.primary_key is None
    assert PrimaryKeyOption() in orders.column("id").options
    assert AutoInc() not in orders.column("status").options


def test_composite_primary_key(shop: Model) -> None:
    """Test that a composite primary key keeps its declared order."""
    lines = shop.table("order_lines")

    assert lines.primary_key is not None
    assert [c.name for c in lines.primary_key.columns] == ["order_id", "line_no"]
    assert not any(column.primary_key for column in lines.columns)


def test_foreign_keys(shop: Model) -> None:
    """Test foreign keys, actions, and keys to excluded tables."""
    orders = shop.table("orders")

    (fk,) = orders.foreign_keys
    assert fk.referencing_columns == (orders.column("customer_id"),)
    assert fk.referenced_table == QualifiedName("customers")
    assert fk.referenced_columns == (shop.table("customers").column("id"),)
    assert fk.on_delete is ForeignKeyAction.CASCADE
    assert fk.on_update is ForeignKeyAction.NO_ACTION


def test_unnamed_foreign_keys_to_same_table(shop: Model) -> None:
    """Test that two unnamed keys to one table stay separate."""
    fks = shop.table("messages").foreign_keys

    assert sorted(fk.referencing_columns[0].name for fk in fks) == [
        "recipient_id",
        "sender_id",
    ]
    assert all(len(fk.referencing_columns) == 1 for fk in fks)


def test_foreign_key_index_is_dropped(shop: Model) -> None:
    """Test that only the user index remains on orders."""
    (index,) = shop.table("orders").indices

    assert index.name == "ix_orders_status"
    assert index.columns == (shop.table("orders").column("status"),)
    assert not index.unique


def test_table_without_primary_key(shop: Model) -> None:
    """Test that tables without keys carry no key information."""
    audit_log = shop.table("audit_log")

    assert audit_log.primary_key is None
    assert audit_log.primary_key_columns == ()


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        (None, RuleCode.NO_ACTION),
        ("CASCADE", RuleCode.CASCADE),
        ("set  null", RuleCode.SET_NULL),
        ("SET DEFAULT", RuleCode.SET_DEFAULT),
        ("restrict", RuleCode.RESTRICT),
    ],
)
def test_rule_code(rule: str | None, expected: RuleCode) -> None:
    """Test mapping of referential actions to rule codes."""
    assert rule_code(rule) == expected
