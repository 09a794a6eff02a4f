"""Bayesian Classifier -- incrementally trained Naive Bayes text classification."""

__version__ = "0.1.0"

from .autosave import AutosaveTask
from .classifier import BayesianClassifier
from .config import ClassifierConfig
from .errors import ClassifierError, ConfigurationError, PersistenceError
from .estimator import ProbabilityEstimator
from .locking import ReadWriteLock
from .models import ModelSnapshot, ScoreItem, rank_scores
from .segmenter import (
    DelimiterSegmenter,
    JiebaSegmenter,
    RegexSegmenter,
    Segmenter,
    filter_terms,
)
from .storage import FileStorage, MemoryStorage, Storage
from .tables import CategoryTable, TermFrequencyTable

__all__ = [
    # Core
    "BayesianClassifier",
    "ClassifierConfig",
    "ProbabilityEstimator",
    "ScoreItem",
    "rank_scores",
    # Model
    "TermFrequencyTable",
    "CategoryTable",
    "ModelSnapshot",
    # Segmentation
    "Segmenter",
    "RegexSegmenter",
    "JiebaSegmenter",
    "DelimiterSegmenter",
    "filter_terms",
    # Persistence
    "Storage",
    "FileStorage",
    "MemoryStorage",
    "AutosaveTask",
    # Concurrency
    "ReadWriteLock",
    # Errors
    "ClassifierError",
    "ConfigurationError",
    "PersistenceError",
]
