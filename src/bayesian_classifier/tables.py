"""Frequency tables backing the classifier model.

Two plain containers hold everything the classifier learns:

- ``TermFrequencyTable`` maps each observed term to its per-category
  occurrence count (one count per training document containing the term).
- ``CategoryTable`` maps each category to the number of training calls
  made under it.

Counts are stored as floats to match the probability arithmetic that
consumes them. Absent keys read as zero; neither table raises on lookup.
The tables are not synchronized themselves -- the engine guards them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TermFrequencyTable:
    """Term -> category -> count mapping.

    An inner mapping is only created when a term is first incremented, so
    every stored term has at least one category entry.
    """

    _counts: dict[str, dict[str, float]] = field(default_factory=dict, repr=False)

    def increment(self, term: str, category: str, amount: float = 1.0) -> None:
        """Add ``amount`` to the count of ``term`` under ``category``."""
        by_category = self._counts.setdefault(term, {})
        by_category[category] = by_category.get(category, 0.0) + amount

    def lookup(self, term: str, category: str) -> Optional[float]:
        """Return the count of ``term`` under ``category``, or None if absent."""
        by_category = self._counts.get(term)
        if by_category is None:
            return None
        return by_category.get(category)

    def total_for_term(self, term: str) -> float:
        """Sum of the term's counts across all categories (0 if unseen)."""
        return sum(self._counts.get(term, {}).values())

    def categories_for_term(self, term: str) -> set[str]:
        """Categories the term has been observed under."""
        return set(self._counts.get(term, {}))

    def clear(self) -> None:
        self._counts.clear()

    def __contains__(self, term: object) -> bool:
        return term in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Deep copy of the table as nested dicts."""
        return {term: dict(cats) for term, cats in self._counts.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, float]]) -> "TermFrequencyTable":
        """Build a table from nested mappings.

        Raises:
            ValueError: If the payload is not a mapping of mappings of numbers.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Term table must be a mapping, got {type(data).__name__}")

        table = cls()
        for term, cats in data.items():
            if not isinstance(cats, Mapping):
                raise ValueError(f"Counts for term {term!r} must be a mapping")
            if not cats:
                # Empty inner mappings never occur in a trained table
                continue
            table._counts[str(term)] = {
                str(cat): _as_count(count, f"{term!r}/{cat!r}") for cat, count in cats.items()
            }
        return table


@dataclass
class CategoryTable:
    """Category -> trained document count mapping."""

    _counts: dict[str, float] = field(default_factory=dict, repr=False)

    def increment(self, category: str, amount: float = 1.0) -> None:
        self._counts[category] = self._counts.get(category, 0.0) + amount

    def count(self, category: str) -> float:
        """Number of training calls made under ``category`` (0 if absent)."""
        return self._counts.get(category, 0.0)

    def total(self) -> float:
        """Sum of all category counts."""
        return sum(self._counts.values())

    def categories(self) -> list[str]:
        return list(self._counts)

    def clear(self) -> None:
        self._counts.clear()

    def __contains__(self, category: object) -> bool:
        return category in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def to_dict(self) -> dict[str, float]:
        return dict(self._counts)

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> "CategoryTable":
        """Build a table from a mapping of category -> count.

        Raises:
            ValueError: If the payload is not a mapping of numbers.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Category table must be a mapping, got {type(data).__name__}")

        table = cls()
        for category, count in data.items():
            table._counts[str(category)] = _as_count(count, repr(category))
        return table


def _as_count(value: object, where: str) -> float:
    """Coerce a serialized count to a non-negative float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Count for {where} must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"Count for {where} must be non-negative, got {value!r}")
    return float(value)
