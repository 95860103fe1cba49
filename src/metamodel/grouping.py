"""Grouping of multi-row key and index fragments into composite entities."""

from collections import Counter, defaultdict
from collections.abc import Callable, Iterable, Sequence
from typing import Any

type Ordering[K] = Callable[[K], Any]


def group_fragments[R, K, E](
    rows: Iterable[R],
    key: Callable[[R], K],
    position: Callable[[R], int],
    build: Callable[[K, Sequence[R]], E],
    order: Ordering[K],
    tiebreak: Ordering[R] | None = None,
) -> list[E]:
    """Collapse fragment rows into one entity per group.

    Rows are grouped by ``key``, each group is sorted by ``position`` to
    recover the declared column order, groups are sorted by ``order(key)``
    and finally every group is passed to ``build``.

    A group that repeats a position holds several anonymous entities that
    share a key, e.g. two unnamed foreign keys from one table to another.
    The n-th row at each position then belongs to the n-th entity. Rows are
    counted in ``tiebreak`` order when given, so the split does not depend on
    the order rows arrive in, and in arrival order otherwise.
    """
    if tiebreak is not None:
        rows = sorted(rows, key=tiebreak)

    groups: defaultdict[tuple[K, int], list[R]] = defaultdict(list)
    seen: defaultdict[K, Counter[int]] = defaultdict(Counter)

    for row in rows:
        group_key = key(row)
        row_position = position(row)
        occurrence = seen[group_key][row_position]
        seen[group_key][row_position] += 1
        groups[group_key, occurrence].append(row)

    ordered = sorted(groups.items(), key=lambda item: (order(item[0][0]), item[0][1]))

    return [
        build(group_key, sorted(fragments, key=position))
        for (group_key, _), fragments in ordered
    ]
