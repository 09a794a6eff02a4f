"""Smoothed conditional-probability estimation over the frequency tables.

The raw estimate ``P(term|category)`` is the fraction of a category's
training documents that contained the term. Rare terms make this estimate
noisy (a term seen once is either 0% or 100% likely), and unseen
(term, category) pairs would zero out a whole-document product. The
weighted estimate blends the raw value with an assumed prior::

    (weight * assumed_prob + total * raw) / (weight + total)

where ``total`` is the number of times the term was seen across all
categories. With ``weight=1`` the prior counts as much as a single
observation; as ``total`` grows the estimate converges to the raw value.
"""

from __future__ import annotations

from .tables import CategoryTable, TermFrequencyTable


class ProbabilityEstimator:
    """Computes raw and weighted conditional probabilities.

    Reads the tables it is given without copying or locking them; callers
    are responsible for holding the model's read lock.

    Args:
        terms: Term frequency table.
        categories: Category document-count table.
    """

    def __init__(self, terms: TermFrequencyTable, categories: CategoryTable) -> None:
        self._terms = terms
        self._categories = categories

    def raw_probability(self, term: str, category: str) -> float:
        """Fraction of ``category``'s documents that contained ``term``.

        Returns 0.0 when the term is unseen, has no count under the
        category, or the category has no trained documents.
        """
        count = self._terms.lookup(term, category)
        if not count:
            return 0.0
        documents = self._categories.count(category)
        if documents <= 0:
            return 0.0
        return count / documents

    def weighted_probability(
        self,
        term: str,
        category: str,
        weight: float,
        assumed_prob: float,
    ) -> float:
        """Raw probability blended with an assumed prior.

        Args:
            term: Term to score.
            category: Category to score it under.
            weight: Weight of the prior, in units of observations (>= 0).
            assumed_prob: Prior probability used for rare or unseen terms.

        Returns:
            A value between ``assumed_prob`` and the raw probability
            (inclusive). When neither the prior nor the data carries any
            weight the prior is returned.
        """
        basic = self.raw_probability(term, category)
        total = self._terms.total_for_term(term)
        denominator = weight + total
        if denominator <= 0:
            return assumed_prob
        return (weight * assumed_prob + total * basic) / denominator
