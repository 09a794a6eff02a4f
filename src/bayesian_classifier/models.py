"""Data models shared by the classifier engine and its collaborators."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .tables import CategoryTable, TermFrequencyTable

#: Default number of results returned by ranked queries.
TOP_N = 10


@dataclass(frozen=True)
class ScoreItem:
    """A (label, probability) pair produced by inference."""

    label: str
    probability: float

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "probability": self.probability,
        }


def rank_scores(scores: Mapping[str, float] | Iterable[tuple[str, float]], top_n: int = TOP_N) -> list[ScoreItem]:
    """Rank label scores by descending probability.

    Equal probabilities are ordered by label ascending so the result is
    deterministic regardless of mapping iteration order.

    Args:
        scores: Mapping or iterable of (label, probability) pairs.
        top_n: Maximum number of items to return.

    Returns:
        At most ``top_n`` ScoreItem objects, best first.
    """
    pairs = scores.items() if isinstance(scores, Mapping) else scores
    ranked = sorted(pairs, key=lambda x: (-x[1], x[0]))
    return [ScoreItem(label=label, probability=prob) for label, prob in ranked[:top_n]]


@dataclass
class ModelSnapshot:
    """Point-in-time copy of the two classifier tables.

    Serialized as ``{"category": {...}, "words": {...}}``.
    """

    categories: dict[str, float] = field(default_factory=dict)
    words: dict[str, dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_tables(cls, terms: TermFrequencyTable, categories: CategoryTable) -> "ModelSnapshot":
        return cls(categories=categories.to_dict(), words=terms.to_dict())

    def to_tables(self) -> tuple[TermFrequencyTable, CategoryTable]:
        """Build fresh tables holding this snapshot's counts."""
        return TermFrequencyTable.from_dict(self.words), CategoryTable.from_dict(self.categories)

    @property
    def is_empty(self) -> bool:
        return not self.categories and not self.words

    def to_dict(self) -> dict:
        return {
            "category": dict(self.categories),
            "words": {term: dict(cats) for term, cats in self.words.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ModelSnapshot":
        """Deserialize a snapshot, validating its structure.

        Missing sections read as empty tables.

        Raises:
            ValueError: If the payload is malformed.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")

        terms = TermFrequencyTable.from_dict(data.get("words") or {})
        categories = CategoryTable.from_dict(data.get("category") or {})
        return cls.from_tables(terms, categories)
