"""Shared test fixtures for bayesian-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayesian_classifier import (
    BayesianClassifier,
    ClassifierConfig,
    FileStorage,
    MemoryStorage,
)

SPAM_DOCS = [
    "Buy cheap pills online now",
    "Cheap watches and cheap pills, limited offer",
    "Win money now, claim your free prize",
    "Exclusive offer: free money for pills buyers",
]

HAM_DOCS = [
    "Meeting agenda attached for tomorrow",
    "Please review the quarterly report before the meeting",
    "Lunch tomorrow with the project team?",
    "The report draft is attached, comments welcome",
]


@pytest.fixture
def config() -> ClassifierConfig:
    """Default configuration without persistence."""
    return ClassifierConfig(default_prob=0.5, default_weight=1.0)


@pytest.fixture
def classifier(config: ClassifierConfig) -> BayesianClassifier:
    """An empty classifier."""
    return BayesianClassifier(config)


@pytest.fixture
def trained(classifier: BayesianClassifier) -> BayesianClassifier:
    """A classifier trained on a small spam/ham corpus."""
    for doc in SPAM_DOCS:
        classifier.train(doc, "spam")
    for doc in HAM_DOCS:
        classifier.train(doc, "ham")
    return classifier


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    """Location for a JSON model file inside a temporary directory."""
    return tmp_path / "models" / "model.json"


@pytest.fixture
def file_storage(model_path: Path) -> FileStorage:
    return FileStorage(model_path)
