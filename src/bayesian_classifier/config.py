"""Validated configuration for the classifier engine.

``ClassifierConfig`` enumerates every recognized option. It is validated
once, on construction; any problem raises ``ConfigurationError`` and the
engine is never built. Two alternate constructors cover loosely-typed
sources:

- ``from_mapping()`` for a plain key/value bag (camelCase keys such as
  ``defaultProb`` are accepted alongside the snake_case field names).
- ``from_env()`` for ``BAYES_*`` environment variables, after loading a
  ``.env`` file with python-dotenv.

Example::

    config = ClassifierConfig(
        default_prob=0.5,
        default_weight=1.0,
        storage=FileStorage("model.json"),
        autosave_interval=60,
    )
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .segmenter import JiebaSegmenter, RegexSegmenter, Segmenter
from .storage import FileStorage, Storage

DEFAULT_PROB = 0.5
DEFAULT_WEIGHT = 1.0
DEFAULT_AUTOSAVE_MAX_FAILURES = 3

# Mapping keys accepted by from_mapping(), normalized to field names
_KEY_ALIASES: dict[str, str] = {
    "default_prob": "default_prob",
    "defaultProb": "default_prob",
    "default_weight": "default_weight",
    "defaultWeight": "default_weight",
    "segmenter": "segmenter",
    "tokenizer": "segmenter",
    "storage": "storage",
    "persistence": "storage",
    "storage_path": "storage",
    "autosave_interval": "autosave_interval",
    "autosaveIntervalSeconds": "autosave_interval",
    "autosave_max_failures": "autosave_max_failures",
    "autosaveMaxFailures": "autosave_max_failures",
    "delimiter": "delimiter",
}

_REQUIRED = ("default_prob", "default_weight")

_SEGMENTERS = {
    "regex": RegexSegmenter,
    "jieba": JiebaSegmenter,
}


@dataclass
class ClassifierConfig:
    """Engine configuration.

    Attributes:
        default_prob: Assumed probability of a term under a category when
            evidence is scarce. Must be within [0, 1].
        default_weight: Weight of ``default_prob``, in observations (>= 0).
        segmenter: Segmenter used by ``train`` and ``categorize``.
        storage: Persistence backend; None disables export/import.
        autosave_interval: Seconds between autosaves; 0 disables autosave.
        autosave_max_failures: Consecutive autosave failures after which
            the autosave task stops; 0 retries forever.
        delimiter: Separator used by ``train_delimited``.
    """

    default_prob: float
    default_weight: float
    segmenter: Segmenter = field(default_factory=RegexSegmenter)
    storage: Optional[Storage] = None
    autosave_interval: int = 0
    autosave_max_failures: int = DEFAULT_AUTOSAVE_MAX_FAILURES
    delimiter: str = "/"

    def __post_init__(self) -> None:
        self.default_prob = _require_number("default_prob", self.default_prob)
        if not 0.0 <= self.default_prob <= 1.0:
            raise ConfigurationError(f"default_prob must be within [0, 1], got {self.default_prob}")

        self.default_weight = _require_number("default_weight", self.default_weight)
        if self.default_weight < 0:
            raise ConfigurationError(f"default_weight must be >= 0, got {self.default_weight}")

        if not callable(getattr(self.segmenter, "segment", None)):
            raise ConfigurationError(f"segmenter must provide segment(), got {self.segmenter!r}")

        if self.storage is not None and not all(
            callable(getattr(self.storage, name, None)) for name in ("save", "load", "exists")
        ):
            raise ConfigurationError(f"storage must provide save/load/exists, got {self.storage!r}")

        self.autosave_interval = _require_int("autosave_interval", self.autosave_interval)
        self.autosave_max_failures = _require_int("autosave_max_failures", self.autosave_max_failures)
        if self.autosave_interval > 0 and self.storage is None:
            raise ConfigurationError("autosave_interval is set but no storage is configured")

        if not isinstance(self.delimiter, str) or not self.delimiter:
            raise ConfigurationError(f"delimiter must be a non-empty string, got {self.delimiter!r}")

    @property
    def autosave_enabled(self) -> bool:
        return self.autosave_interval > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClassifierConfig":
        """Build a config from a loosely-typed mapping.

        ``storage`` may be a Storage instance or a file path;
        ``segmenter`` may be a Segmenter instance or one of ``"regex"``,
        ``"jieba"``.

        Raises:
            ConfigurationError: On unknown keys, missing required keys,
                or invalid values.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key)
            if name is None:
                raise ConfigurationError(
                    f"Unknown configuration key: {key!r}. Known: {sorted(_KEY_ALIASES)}"
                )
            if name in kwargs:
                raise ConfigurationError(f"Configuration key {key!r} given more than once")
            kwargs[name] = value

        missing = [name for name in _REQUIRED if name not in kwargs]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

        if isinstance(kwargs.get("storage"), (str, os.PathLike)):
            kwargs["storage"] = FileStorage(kwargs["storage"])
        if isinstance(kwargs.get("segmenter"), str):
            kwargs["segmenter"] = _segmenter_by_name(kwargs["segmenter"])

        return cls(**kwargs)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "ClassifierConfig":
        """Build a config from ``BAYES_*`` environment variables.

        Variables:
            BAYES_DEFAULT_PROB: required float.
            BAYES_DEFAULT_WEIGHT: required float.
            BAYES_STORAGE_PATH: JSON model file (optional).
            BAYES_AUTOSAVE_INTERVAL: seconds (optional, default 0).
            BAYES_AUTOSAVE_MAX_FAILURES: count (optional).
            BAYES_SEGMENTER: ``regex`` or ``jieba`` (optional).
            BAYES_DELIMITER: delimiter for delimited training (optional).

        Raises:
            ConfigurationError: On missing or unparsable values.
        """
        load_dotenv(dotenv_path)

        data: dict[str, Any] = {}
        for name, var, parse in (
            ("default_prob", "BAYES_DEFAULT_PROB", float),
            ("default_weight", "BAYES_DEFAULT_WEIGHT", float),
            ("autosave_interval", "BAYES_AUTOSAVE_INTERVAL", int),
            ("autosave_max_failures", "BAYES_AUTOSAVE_MAX_FAILURES", int),
            ("storage_path", "BAYES_STORAGE_PATH", str),
            ("segmenter", "BAYES_SEGMENTER", str),
            ("delimiter", "BAYES_DELIMITER", str),
        ):
            raw = os.getenv(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                data[name] = parse(raw.strip())
            except ValueError as exc:
                raise ConfigurationError(f"{var} is not a valid {parse.__name__}: {raw!r}") from exc

        return cls.from_mapping(data)


def _require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    return float(value)


def _require_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def _segmenter_by_name(name: str) -> Segmenter:
    factory = _SEGMENTERS.get(name.strip().lower())
    if factory is None:
        raise ConfigurationError(f"Unknown segmenter {name!r}. Known: {sorted(_SEGMENTERS)}")
    try:
        return factory()
    except ImportError as exc:
        raise ConfigurationError(f"Segmenter {name!r} is unavailable: {exc}") from exc
