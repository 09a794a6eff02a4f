"""Naive Bayes text classifier with an incrementally trained frequency model.

The engine learns which terms appear in documents of each category and
scores new documents with::

    P(category | document) ∝ P(document | category) * P(category)

where ``P(document | category)`` is the product of the weighted
conditional probabilities of the document's terms (see
``ProbabilityEstimator``) and ``P(category)`` is the category's share of
all trained documents.

Features:
- Incremental training, one labeled document at a time
- Per-word probability distributions across categories
- Ranked document categorization, optionally normalized to sum to 1
- Thread-safe: one readers-writer lock guards the model
- Snapshot export/import through a pluggable storage backend
- Optional periodic autosave

Example::

    config = ClassifierConfig(default_prob=0.5, default_weight=1.0)
    classifier = BayesianClassifier(config)
    classifier.train("buy cheap pills", "spam")
    classifier.train("meeting agenda attached", "ham")

    classifier.categorize("buy pills")[0].label  # "spam"
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from .autosave import AutosaveTask
from .config import ClassifierConfig
from .errors import PersistenceError
from .estimator import ProbabilityEstimator
from .locking import ReadWriteLock
from .models import TOP_N, ModelSnapshot, ScoreItem, rank_scores
from .segmenter import DelimiterSegmenter, Segmenter
from .tables import CategoryTable, TermFrequencyTable

logger = logging.getLogger(__name__)


class BayesianClassifier:
    """Incrementally trained Naive Bayes text classifier.

    Args:
        config: Validated engine configuration.
        autoload: Hydrate the model from ``config.storage`` when a snapshot
            exists. A missing snapshot starts an empty model.

    Raises:
        PersistenceError: If ``autoload`` is set and an existing snapshot
            cannot be read.
    """

    def __init__(self, config: ClassifierConfig, autoload: bool = True) -> None:
        self.config = config
        self._terms = TermFrequencyTable()
        self._categories = CategoryTable()
        self._estimator = ProbabilityEstimator(self._terms, self._categories)
        self._lock = ReadWriteLock()
        # Serializes export/import against each other
        self._io_lock = threading.Lock()

        self._autosave: Optional[AutosaveTask] = None
        if config.autosave_enabled:
            self._autosave = AutosaveTask(
                self.export,
                interval=config.autosave_interval,
                max_failures=config.autosave_max_failures,
            )

        if autoload and config.storage is not None:
            if config.storage.exists():
                logger.info("Loading model from %r", config.storage)
                self.import_()
            else:
                logger.info("No saved model found; starting empty")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "BayesianClassifier":
        """Start background autosave, if configured."""
        if self._autosave is not None:
            self._autosave.start()
        return self

    def close(self) -> None:
        """Stop background autosave. The model stays usable."""
        if self._autosave is not None:
            self._autosave.stop()

    def __enter__(self) -> "BayesianClassifier":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def autosave(self) -> Optional[AutosaveTask]:
        return self._autosave

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, document: str, category: str) -> None:
        """Train on a document using the configured segmenter.

        Each distinct term counts once per document, however often it
        repeats. Empty documents or categories (after trimming) are
        ignored.
        """
        self._train(document, category, self.config.segmenter)

    def train_delimited(self, document: str, category: str, delimiter: Optional[str] = None) -> None:
        """Train on a pre-tokenized document split on a fixed delimiter.

        Args:
            document: Terms joined by the delimiter, e.g. ``"a/b/c"``.
            category: Category label.
            delimiter: Overrides the configured delimiter.
        """
        segmenter = DelimiterSegmenter(delimiter or self.config.delimiter)
        self._train(document, category, segmenter)

    def _train(self, document: str, category: str, segmenter: Segmenter) -> None:
        document = document.strip()
        category = category.strip()
        if not document or not category:
            logger.debug("Ignoring training call with empty document or category")
            return

        # dict.fromkeys keeps first-seen order while dropping repeats
        terms = list(dict.fromkeys(segmenter.segment(document)))

        with self._lock.write_locked():
            for term in terms:
                self._terms.increment(term, category)
            self._categories.increment(category)

        logger.debug("Trained %d terms under %r", len(terms), category)

    def reset(self) -> None:
        """Forget everything learned so far."""
        with self._lock.write_locked():
            self._terms.clear()
            self._categories.clear()
        logger.info("Model reset")

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def word_probability(self, word: str, category: str) -> float:
        """Weighted probability of ``word`` under ``category``."""
        with self._lock.read_locked():
            return self._weighted(word, category)

    def score_word(self, word: str, category: Optional[str] = None) -> list[ScoreItem]:
        """Probability distribution of a single word across categories.

        Args:
            word: Term to score.
            category: Restrict the result to this category.

        Returns:
            An empty list for a word never seen in training. Otherwise a
            single item when ``category`` is given, or up to 10 items for
            the categories the word was seen under, highest first (ties by
            category name).
        """
        if category:
            category = category.strip()
        with self._lock.read_locked():
            if word not in self._terms:
                return []
            if category:
                return [ScoreItem(label=category, probability=self._weighted(word, category))]
            scores = {
                cat: self._weighted(word, cat) for cat in self._terms.categories_for_term(word)
            }
        return rank_scores(scores, TOP_N)

    def categorize(self, document: str, normalize: bool = False) -> list[ScoreItem]:
        """Rank categories for a document.

        Every token of the document counts, repeats included.

        Args:
            document: Raw document text.
            normalize: Return posteriors normalized to sum to 1 (computed in
                log space) instead of the raw unnormalized products.

        Returns:
            Up to 10 ScoreItem objects, best first; empty when nothing has
            been trained.
        """
        terms = self.config.segmenter.segment(document)

        with self._lock.read_locked():
            total = self._categories.total()
            if total <= 0:
                return []
            if normalize:
                log_scores = {
                    cat: self._log_posterior(terms, cat, total) for cat in self._categories
                }
            else:
                scores = {
                    cat: self._document_probability(terms, cat) * self._categories.count(cat) / total
                    for cat in self._categories
                }

        if normalize:
            scores = _normalize_log_scores(log_scores)
        return rank_scores(scores, TOP_N)

    def list_categories(self) -> Mapping[str, float]:
        """Read-only copy of the category -> document count table."""
        with self._lock.read_locked():
            return MappingProxyType(self._categories.to_dict())

    @property
    def vocabulary_size(self) -> int:
        with self._lock.read_locked():
            return len(self._terms)

    def _weighted(self, word: str, category: str) -> float:
        return self._estimator.weighted_probability(
            word, category, self.config.default_weight, self.config.default_prob
        )

    def _document_probability(self, terms: list[str], category: str) -> float:
        # Underflows toward 0 for long documents; use normalize=True there
        prob = 1.0
        for term in terms:
            prob *= self._weighted(term, category)
        return prob

    def _log_posterior(self, terms: list[str], category: str, total: float) -> float:
        score = _safe_log(self._categories.count(category) / total)
        for term in terms:
            score += _safe_log(self._weighted(term, category))
        return score

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> ModelSnapshot:
        """Consistent point-in-time copy of the model."""
        with self._lock.read_locked():
            return ModelSnapshot.from_tables(self._terms, self._categories)

    def export(self) -> None:
        """Save the model through the configured storage.

        The model is copied under the read lock and written outside it, so
        training continues while the snapshot is being saved.

        Raises:
            PersistenceError: If no storage is configured or the save fails.
        """
        storage = self._require_storage()
        with self._io_lock:
            snapshot = self.snapshot()
            storage.save(snapshot)
        logger.info(
            "Exported model: %d categories, %d terms",
            len(snapshot.categories),
            len(snapshot.words),
        )

    def import_(self) -> None:
        """Replace the model with the snapshot held by storage.

        Raises:
            PersistenceError: If no storage is configured or the load fails.
                The current model is left untouched on failure.
        """
        storage = self._require_storage()
        with self._io_lock:
            snapshot = storage.load()
            try:
                terms, categories = snapshot.to_tables()
            except ValueError as exc:
                raise PersistenceError(f"Invalid snapshot: {exc}") from exc
            with self._lock.write_locked():
                self._swap_tables(terms, categories)
        logger.info(
            "Imported model: %d categories, %d terms",
            len(snapshot.categories),
            len(snapshot.words),
        )

    def export_now(self) -> bool:
        """Export and report success instead of raising."""
        try:
            self.export()
        except PersistenceError as exc:
            logger.error("Export failed: %s", exc)
            return False
        return True

    def _require_storage(self):
        if self.config.storage is None:
            raise PersistenceError("No storage configured")
        return self.config.storage

    def _swap_tables(self, terms: TermFrequencyTable, categories: CategoryTable) -> None:
        self._terms = terms
        self._categories = categories
        self._estimator = ProbabilityEstimator(terms, categories)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _safe_log(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


def _normalize_log_scores(log_scores: dict[str, float]) -> dict[str, float]:
    """Turn log posteriors into probabilities using log-sum-exp."""
    max_score = max(log_scores.values())
    if max_score == -math.inf:
        return {cat: 0.0 for cat in log_scores}
    exp_scores = {cat: math.exp(s - max_score) for cat, s in log_scores.items()}
    total = sum(exp_scores.values())
    return {cat: score / total for cat, score in exp_scores.items()}
