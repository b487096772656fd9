"""
Receivers of worker events.
"""
from __future__ import annotations

import threading
from logging import getLogger

from hash_guesser.config import SEARCH_LOGGER

logger = getLogger(SEARCH_LOGGER)


class ProgressSink:
    """Presentation-layer interface.

    Callbacks run on the orchestrator's event thread, one at a time, in the
    order each worker sent its events.
    """

    def on_worker_started(self, worker_id: int) -> None:
        pass

    def on_progress(self, worker_id: int, last_candidate: str,
                    recent_throughput: float, cumulative_count: int) -> None:
        pass

    def on_match_found(self, worker_id: int, candidate: str) -> None:
        pass

    def on_worker_stopped(self, worker_id: int, matched: bool) -> None:
        pass


class LoggingProgressSink(ProgressSink):
    """Write worker events to the search logger."""

    def on_worker_started(self, worker_id: int) -> None:
        logger.info(f"[worker {worker_id}] - started")

    def on_progress(self, worker_id: int, last_candidate: str,
                    recent_throughput: float, cumulative_count: int) -> None:
        logger.info(
            f"[worker {worker_id}] - Progress: {recent_throughput:,.0f} H/s, "
            f"total={cumulative_count:,} current={last_candidate!r}")

    def on_match_found(self, worker_id: int, candidate: str) -> None:
        logger.info(f"[worker {worker_id}] - FOUND plaintext: {candidate!r}")

    def on_worker_stopped(self, worker_id: int, matched: bool) -> None:
        logger.info(f"[worker {worker_id}] - stopped (matched={matched})")


class StatusBoard(LoggingProgressSink):
    """Keep the latest row per worker, for display.

    A row holds worker id, last candidate, recent rate, total and state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.rows: dict[int, dict] = {}

    def _row(self, worker_id: int) -> dict:
        return self.rows.setdefault(worker_id, {
            "worker_id": worker_id,
            "last_candidate": "",
            "rate": 0.0,
            "total": 0,
            "state": "running",
            "matched": False,
        })

    def on_worker_started(self, worker_id: int) -> None:
        super().on_worker_started(worker_id)
        with self._lock:
            self._row(worker_id)

    def on_progress(self, worker_id: int, last_candidate: str,
                    recent_throughput: float, cumulative_count: int) -> None:
        logger.debug(
            f"[worker {worker_id}] - {recent_throughput:,.0f} H/s total={cumulative_count:,}")
        with self._lock:
            row = self._row(worker_id)
            row["last_candidate"] = last_candidate
            row["rate"] = recent_throughput
            row["total"] = cumulative_count

    def on_worker_stopped(self, worker_id: int, matched: bool) -> None:
        super().on_worker_stopped(worker_id, matched)
        with self._lock:
            row = self._row(worker_id)
            row["state"] = "stopped"
            row["matched"] = matched

    def snapshot(self) -> list[dict]:
        with self._lock:
            return [dict(row) for _, row in sorted(self.rows.items())]
