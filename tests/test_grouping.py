"""Tests for grouping key and index fragments."""

from collections.abc import Sequence
from typing import NamedTuple

from metamodel.grouping import group_fragments


class Fragment(NamedTuple):
    """Minimal fragment row."""

    group: str
    position: int
    column: str


def collect(rows: list[Fragment]) -> list[tuple[str, list[str]]]:
    """Group fragments into (group, columns) pairs."""

    def build(key: str, fragments: Sequence[Fragment]) -> tuple[str, list[str]]:
        return key, [fragment.column for fragment in fragments]

    return group_fragments(
        rows,
        key=lambda row: row.group,
        position=lambda row: row.position,
        build=build,
        order=lambda key: key,
    )


def test_fragments_are_ordered_by_position() -> None:
    """Test that declared order is recovered from shuffled rows."""
    rows = [
        Fragment("ix", 3, "c"),
        Fragment("ix", 1, "a"),
        Fragment("ix", 2, "b"),
    ]

    assert collect(rows) == [("ix", ["a", "b", "c"])]


def test_groups_are_sorted_by_key() -> None:
    """Test that group order does not depend on row order."""
    rows = [
        Fragment("zeta", 1, "z"),
        Fragment("alpha", 2, "b"),
        Fragment("alpha", 1, "a"),
    ]

    assert collect(rows) == [("alpha", ["a", "b"]), ("zeta", ["z"])]
    assert collect(list(reversed(rows))) == collect(rows)


def test_repeated_positions_split_groups() -> None:
    """Test that anonymous entities sharing a key stay separate."""
    rows = [
        Fragment("", 1, "sender_id"),
        Fragment("", 1, "recipient_id"),
    ]

    assert collect(rows) == [("", ["sender_id"]), ("", ["recipient_id"])]


def test_repeated_positions_keep_composite_entities() -> None:
    """Test that splitting keeps multi column entities together."""
    rows = [
        Fragment("", 1, "a1"),
        Fragment("", 2, "a2"),
        Fragment("", 1, "b1"),
    ]

    assert collect(rows) == [("", ["a1", "a2"]), ("", ["b1"])]


def test_no_rows() -> None:
    """Test that no fragments produce no entities."""
    assert collect([]) == []


def test_tiebreak_makes_split_independent_of_row_order() -> None:
    """Test that anonymous entities pair up the same for any row order."""
    rows = [
        Fragment("", 1, "b1"),
        Fragment("", 2, "a2"),
        Fragment("", 1, "a1"),
        Fragment("", 2, "b2"),
    ]

    def build(key: str, fragments: Sequence[Fragment]) -> tuple[str, list[str]]:
        return key, [fragment.column for fragment in fragments]

    def split(ordered: list[Fragment]) -> list[tuple[str, list[str]]]:
        return group_fragments(
            ordered,
            key=lambda row: row.group,
            position=lambda row: row.position,
            build=build,
            order=lambda key: key,
            tiebreak=lambda row: row.column,
        )

    expected = [("", ["a1", "a2"]), ("", ["b1", "b2"])]
    assert split(rows) == expected
    assert split(sorted(rows)) == expected
