"""
Task-wide pause/stop flags shared by every worker process of a search.
"""
from __future__ import annotations

import multiprocessing
from multiprocessing.context import BaseContext
from typing import Optional

from hash_guesser.config import WORKER_START_METHOD
from hash_guesser.errors import ConfigurationError

# shared-memory encoding of a reporting interval of None
_NO_INTERVAL = -1.0


class SearchControl:
    """Pause, resume and stop flags plus the reporting interval.

    The flags are ``multiprocessing`` events, so a write made by the
    orchestrator is seen by every worker process. ``_running`` is cleared
    while the search is paused. Resume and stop both set it, which wakes
    every worker blocked in ``wait_while_paused`` at once. Writers take one
    shared lock so each method can tell whether it changed anything.
    """

    def __init__(self, reporting_interval: Optional[float] = None,
                 context: Optional[BaseContext] = None) -> None:
        context = context or multiprocessing.get_context(WORKER_START_METHOD)
        self._changes = context.Lock()
        self._running = context.Event()
        self._running.set()
        self._stopped = context.Event()
        self._interval = context.Value("d", _encode(validate_interval(reporting_interval)))

    @property
    def paused(self) -> bool:
        return not self._running.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def reporting_interval(self) -> Optional[float]:
        seconds = self._interval.value
        return None if seconds == _NO_INTERVAL else seconds

    @reporting_interval.setter
    def reporting_interval(self, seconds: Optional[float]) -> None:
        self._interval.value = _encode(validate_interval(seconds))

    def pause(self) -> bool:
        """Pause every worker. Returns False when nothing changed."""
        with self._changes:
            if self.paused or self.stopped:
                return False
            self._running.clear()
            return True

    def resume(self) -> bool:
        """Wake every paused worker. Returns False when nothing changed."""
        with self._changes:
            if not self.paused:
                return False
            self._running.set()
            return True

    def stop(self) -> bool:
        """Stop every worker, paused ones included. Returns False when already stopped."""
        with self._changes:
            if self.stopped:
                return False
            self._stopped.set()
            # paused workers wake up and find the stop flag
            self._running.set()
            return True

    def wait_while_paused(self) -> bool:
        """Block while paused.

        Returns True when the caller may keep working, False once stopped.
        """
        self._running.wait()
        return not self.stopped


def validate_interval(seconds: Optional[float]) -> Optional[float]:
    if seconds is not None and seconds < 0:
        raise ConfigurationError(f"reporting interval must not be negative, got {seconds}")
    return seconds


def _encode(seconds: Optional[float]) -> float:
    return _NO_INTERVAL if seconds is None else float(seconds)
