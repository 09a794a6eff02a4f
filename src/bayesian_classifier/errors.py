"""Exception types raised by the classifier engine and its collaborators."""

from __future__ import annotations


class ClassifierError(Exception):
    """Base class for all classifier errors."""


class ConfigurationError(ClassifierError):
    """Raised when the engine configuration is missing or invalid.

    This is a startup failure: an engine is never constructed from a
    configuration that fails validation.
    """


class PersistenceError(ClassifierError):
    """Raised when saving or loading a model snapshot fails.

    The originating exception, if any, is chained as ``__cause__``.
    """
