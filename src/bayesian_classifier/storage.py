"""Persistence backends for classifier model snapshots.

A storage backend saves and loads ``ModelSnapshot`` objects. The engine
only relies on round-trip fidelity: ``load()`` after ``save(snapshot)``
must reproduce the same tables. Two backends are provided:

- ``FileStorage`` -- a JSON file, replaced atomically on every save.
- ``MemoryStorage`` -- an in-process copy, useful for tests and for
  engines that do not need durability.

All backend failures surface as ``PersistenceError``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import PersistenceError
from .models import ModelSnapshot

logger = logging.getLogger(__name__)

_io_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, max=1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)


class Storage(ABC):
    """Abstract base class for snapshot storage."""

    @abstractmethod
    def save(self, snapshot: ModelSnapshot) -> None:
        """Persist a snapshot, replacing any previous one.

        Raises:
            PersistenceError: If the snapshot could not be written.
        """
        ...

    @abstractmethod
    def load(self) -> ModelSnapshot:
        """Load the most recently saved snapshot.

        Raises:
            PersistenceError: If no snapshot exists or it cannot be read.
        """
        ...

    @abstractmethod
    def exists(self) -> bool:
        """Whether a snapshot is available to load."""
        ...


class FileStorage(Storage):
    """JSON file storage.

    Saves write to a temporary file in the target directory and then
    replace the target, so a crash mid-write never leaves a truncated
    model behind. Transient ``OSError``s are retried a few times before
    giving up.

    Args:
        path: Location of the JSON model file. Parent directories are
            created on first save.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, snapshot: ModelSnapshot) -> None:
        payload = json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)
        try:
            self._write(payload)
        except OSError as exc:
            raise PersistenceError(f"Failed to save model to {self.path}: {exc}") from exc
        logger.debug("Saved model to %s (%d bytes)", self.path, len(payload))

    def load(self) -> ModelSnapshot:
        if not self.exists():
            raise PersistenceError(f"No model file at {self.path}")
        try:
            raw = self._read()
        except OSError as exc:
            raise PersistenceError(f"Failed to read model from {self.path}: {exc}") from exc

        try:
            return ModelSnapshot.from_dict(json.loads(raw))
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError too
            raise PersistenceError(f"Corrupt model file {self.path}: {exc}") from exc

    @_io_retry
    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @_io_retry
    def _read(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"FileStorage(path={str(self.path)!r})"


class MemoryStorage(Storage):
    """In-memory storage holding a serialized copy of the last snapshot.

    Storing the serialized form (rather than the object) means later
    mutation of a saved snapshot never leaks into the stored copy.
    """

    def __init__(self) -> None:
        self._data: Optional[dict] = None

    def exists(self) -> bool:
        return self._data is not None

    def save(self, snapshot: ModelSnapshot) -> None:
        self._data = snapshot.to_dict()

    def load(self) -> ModelSnapshot:
        if self._data is None:
            raise PersistenceError("No snapshot has been saved")
        return ModelSnapshot.from_dict(self._data)
