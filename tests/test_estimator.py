"""Tests for raw and weighted conditional probability estimation."""

from __future__ import annotations

import pytest

from bayesian_classifier.estimator import ProbabilityEstimator
from bayesian_classifier.tables import CategoryTable, TermFrequencyTable


@pytest.fixture
def estimator() -> ProbabilityEstimator:
    """Estimator over: 4 spam docs, 2 ham docs.

    "pills" appears in 3 spam docs, "meeting" in 2 ham docs, "offer" in
    1 spam and 1 ham doc.
    """
    terms = TermFrequencyTable()
    categories = CategoryTable()
    for _ in range(3):
        terms.increment("pills", "spam")
    for _ in range(2):
        terms.increment("meeting", "ham")
    terms.increment("offer", "spam")
    terms.increment("offer", "ham")
    categories.increment("spam", 4)
    categories.increment("ham", 2)
    return ProbabilityEstimator(terms, categories)


class TestRawProbability:
    """Tests for ProbabilityEstimator.raw_probability."""

    def test_unseen_term_is_zero(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.raw_probability("ghost", "spam") == 0.0

    def test_term_absent_from_category_is_zero(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.raw_probability("pills", "ham") == 0.0

    def test_fraction_of_category_documents(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.raw_probability("pills", "spam") == pytest.approx(0.75)
        assert estimator.raw_probability("meeting", "ham") == pytest.approx(1.0)
        assert estimator.raw_probability("offer", "ham") == pytest.approx(0.5)

    def test_unknown_category_is_zero(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.raw_probability("pills", "news") == 0.0


class TestWeightedProbability:
    """Tests for ProbabilityEstimator.weighted_probability."""

    def test_formula(self, estimator: ProbabilityEstimator) -> None:
        # total = 3, raw = 0.75 -> (1*0.5 + 3*0.75) / (1 + 3)
        assert estimator.weighted_probability("pills", "spam", 1.0, 0.5) == pytest.approx(0.6875)

    def test_pulled_toward_prior_for_absent_category(self, estimator: ProbabilityEstimator) -> None:
        # total = 3, raw = 0 -> 0.5 / 4
        assert estimator.weighted_probability("pills", "ham", 1.0, 0.5) == pytest.approx(0.125)

    def test_unseen_term_returns_prior(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.weighted_probability("ghost", "spam", 1.0, 0.5) == pytest.approx(0.5)
        assert estimator.weighted_probability("ghost", "spam", 3.0, 0.2) == pytest.approx(0.2)

    def test_zero_weight_returns_raw(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.weighted_probability("pills", "spam", 0.0, 0.5) == pytest.approx(0.75)

    def test_zero_weight_and_no_evidence_returns_prior(self, estimator: ProbabilityEstimator) -> None:
        assert estimator.weighted_probability("ghost", "spam", 0.0, 0.3) == pytest.approx(0.3)

    def test_converges_to_raw_with_evidence(self) -> None:
        terms = TermFrequencyTable()
        categories = CategoryTable()
        for _ in range(1000):
            terms.increment("common", "a")
        categories.increment("a", 1000)
        est = ProbabilityEstimator(terms, categories)
        assert est.weighted_probability("common", "a", 1.0, 0.5) == pytest.approx(1.0, abs=1e-3)

    @pytest.mark.parametrize("weight", [0.0, 0.5, 1.0, 10.0])
    @pytest.mark.parametrize("assumed", [0.0, 0.25, 0.5, 1.0])
    @pytest.mark.parametrize("term", ["pills", "meeting", "offer", "ghost"])
    @pytest.mark.parametrize("category", ["spam", "ham", "news"])
    def test_stays_between_prior_and_raw(
        self,
        estimator: ProbabilityEstimator,
        weight: float,
        assumed: float,
        term: str,
        category: str,
    ) -> None:
        raw = estimator.raw_probability(term, category)
        value = estimator.weighted_probability(term, category, weight, assumed)
        assert min(assumed, raw) - 1e-12 <= value <= max(assumed, raw) + 1e-12
