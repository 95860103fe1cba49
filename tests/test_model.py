"""Tests for the schema model and its consistency check."""

import pytest

from metamodel.errors import ConsistencyError
from metamodel.model import (
    Column,
    ForeignKey,
    ForeignKeyAction,
    Index,
    Model,
    PrimaryKey,
    PrimaryKeyOption,
    Table,
)
from metamodel.names import NameIndex, QualifiedName

PARENT = QualifiedName("parent")
CHILD = QualifiedName("child")


@pytest.fixture(name="parent")
def parent_table() -> Table:
    """Table with a single column primary key."""
    return Table(
        PARENT,
        (Column("id", PARENT, 4, nullable=False, options=frozenset({PrimaryKeyOption()})),),
    )


@pytest.fixture(name="child_columns")
def child_table_columns() -> tuple[Column, ...]:
    """Columns of the child table."""
    return (Column("id", CHILD, 4), Column("parent_id", CHILD, 4))


def test_qualified_name_ordering() -> None:
    """Test that absent schema parts sort before present ones."""
    names = [
        QualifiedName("b"),
        QualifiedName("a", schema="s"),
        QualifiedName("a"),
        QualifiedName("a", schema="s", catalog="c"),
    ]

    assert sorted(names) == [
        QualifiedName("a"),
        QualifiedName("a", schema="s"),
        QualifiedName("a", schema="s", catalog="c"),
        QualifiedName("b"),
    ]


def test_qualified_name_str() -> None:
    """Test that names render with their present parts only."""
    assert str(QualifiedName("t")) == "t"
    assert str(QualifiedName("t", schema="s", catalog="c")) == "c.s.t"


def test_name_index_ambiguous_case_fold() -> None:
    """Test that an ambiguous folded lookup finds nothing."""
    index = NameIndex([("Id", 1), ("ID", 2)], str.casefold)

    assert index.get("Id") == 1
    assert index.get("ID") == 2
    assert index.get("id") is None
    assert "iD" not in index


def test_foreign_key_action_sql() -> None:
    """Test SQL spelling of referential actions."""
    assert ForeignKeyAction.SET_NULL.sql == "SET NULL"
    assert ForeignKeyAction.CASCADE.sql == "CASCADE"


def test_primary_key_columns(parent: Table, child_columns: tuple[Column, ...]) -> None:
    """Test that both key representations are exposed alike."""
    composite = Table(CHILD, child_columns, PrimaryKey("pk", CHILD, child_columns))

    assert parent.primary_key_columns == parent.columns
    assert composite.primary_key_columns == child_columns
    assert Table(CHILD, child_columns).primary_key_columns == ()


def test_consistent_model(parent: Table, child_columns: tuple[Column, ...]) -> None:
    """Test that a well formed model passes the check."""
    fk = ForeignKey("fk", CHILD, child_columns[1:], PARENT, parent.columns)
    child = Table(CHILD, child_columns, foreign_keys=(fk,))

    Model((child, parent)).assert_consistency()


def test_foreign_key_to_missing_table(
    parent: Table,
    child_columns: tuple[Column, ...],
) -> None:
    """Test that a key to a table outside the model is a violation."""
    fk = ForeignKey("fk", CHILD, child_columns[1:], PARENT, parent.columns)

    with pytest.raises(ConsistencyError, match="missing table"):
        Model((Table(CHILD, child_columns, foreign_keys=(fk,)),)).assert_consistency()


def test_foreign_key_column_count_mismatch(
    parent: Table,
    child_columns: tuple[Column, ...],
) -> None:
    """Test that referencing and referenced columns must pair up."""
    fk = ForeignKey("fk", CHILD, child_columns, PARENT, parent.columns)
    child = Table(CHILD, child_columns, foreign_keys=(fk,))

    with pytest.raises(ConsistencyError, match="mismatched"):
        Model((child, parent)).assert_consistency()


def test_referenced_column_not_in_table(
    parent: Table,
    child_columns: tuple[Column, ...],
) -> None:
    """Test that referenced columns must belong to the referenced table."""
    stranger = Column("code", PARENT, 12)
    fk = ForeignKey("fk", CHILD, child_columns[1:], PARENT, (stranger,))
    child = Table(CHILD, child_columns, foreign_keys=(fk,))

    with pytest.raises(ConsistencyError, match="'code'"):
        Model((child, parent)).assert_consistency()


def test_index_column_not_in_table(child_columns: tuple[Column, ...]) -> None:
    """Test that index columns must belong to their table."""
    index = Index("ix", CHILD, (Column("other", CHILD, 4),))

    with pytest.raises(ConsistencyError):
        Model((Table(CHILD, child_columns, indices=(index,)),)).assert_consistency()


def test_single_column_primary_key_entity(child_columns: tuple[Column, ...]) -> None:
    """Test that primary key entities need two or more columns."""
    pk = PrimaryKey("pk", CHILD, child_columns[:1])

    with pytest.raises(ConsistencyError):
        Model((Table(CHILD, child_columns, pk),)).assert_consistency()


def test_duplicate_tables(parent: Table) -> None:
    """Test that table names are unique within a model."""
    with pytest.raises(ConsistencyError, match="duplicate"):
        Model((parent, parent)).assert_consistency()
