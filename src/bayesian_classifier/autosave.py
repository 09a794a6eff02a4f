"""Periodic background saving of the classifier model."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class AutosaveTask:
    """Calls ``save`` every ``interval`` seconds on a daemon thread.

    A failed save is logged and counted. After ``max_failures`` consecutive
    failures the task stops itself; a successful save or a restart resets
    the count.
    With ``max_failures=0`` it keeps retrying forever. Stopping the task
    never affects the engine, which keeps serving requests.

    Args:
        save: Zero-argument callable performing one save. Expected to raise
            PersistenceError on failure.
        interval: Seconds between saves (> 0).
        max_failures: Consecutive failures tolerated before stopping.
    """

    def __init__(
        self,
        save: Callable[[], object],
        interval: float,
        max_failures: int = 3,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._save = save
        self.interval = interval
        self.max_failures = max_failures
        self.consecutive_failures = 0
        self.saves = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread. Calling twice is a no-op."""
        if self.running:
            return
        self._stop.clear()
        self.consecutive_failures = 0
        self._thread = threading.Thread(target=self._run, name="bayes-autosave", daemon=True)
        self._thread.start()
        logger.info("Autosave started (every %ss)", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the thread to stop and wait for it to exit."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            if not self.run_once():
                break

    def run_once(self) -> bool:
        """Perform one save. Returns False when the task should stop."""
        try:
            self._save()
        except PersistenceError as exc:
            self.consecutive_failures += 1
            logger.warning(
                "Autosave failed (%d consecutive): %s", self.consecutive_failures, exc
            )
            if self.max_failures and self.consecutive_failures >= self.max_failures:
                logger.error(
                    "Autosave stopped after %d consecutive failures", self.consecutive_failures
                )
                return False
            return True

        self.consecutive_failures = 0
        self.saves += 1
        logger.info("Autosave succeeded")
        return True
