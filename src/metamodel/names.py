"""Qualified table names and case tolerant name lookup."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@total_ordering
@dataclass(frozen=True)
class QualifiedName:
    """Table name with optional schema and catalog."""

    name: str
    schema: str | None = None
    catalog: str | None = None

    @property
    def sort_key(self) -> tuple[str, str, str]:
        """Key that orders names with absent parts first."""
        return (self.name, self.schema or "", self.catalog or "")

    def casefold(self) -> tuple[str, str, str]:
        """Case insensitive form of the name."""
        name, schema, catalog = self.sort_key
        return (name.casefold(), schema.casefold(), catalog.casefold())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, QualifiedName):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return ".".join(part for part in (self.catalog, self.schema, self.name) if part)


class NameIndex[K, V]:
    """Mapping that falls back to a case-folded lookup when unambiguous.

    Catalog views of the same database do not always agree on identifier
    case, so an exact match is tried first and a folded match second.
    """

    def __init__(
        self,
        items: Iterable[tuple[K, V]],
        fold: Callable[[K], object],
    ) -> None:
        """Index the given key/value pairs."""
        self._fold = fold
        self._exact: dict[K, V] = {}
        self._folded: dict[object, list[V]] = {}
        for key, value in items:
            self._exact[key] = value
            self._folded.setdefault(fold(key), []).append(value)

    def get(self, key: K) -> V | None:
        """Return the value for key, or None when missing or ambiguous."""
        if key in self._exact:
            return self._exact[key]
        match self._folded.get(self._fold(key), []):
            case [value]:
                return value
            case _:
                return None

    def __contains__(self, key: K) -> bool:
        return self.get(key) is not None
