"""
Search worker process.
"""
from __future__ import annotations

import multiprocessing
import time
from typing import Any

from hash_guesser.config import WORKER_START_METHOD
from hash_guesser.cracker.control import SearchControl
from hash_guesser.cracker.cracker_core import digests_match, hasher_for
from hash_guesser.models.models import WorkerEvent, WorkerState, WorkerStatus
from hash_guesser.streams import CandidateStream


class SearchWorker(multiprocessing.get_context(WORKER_START_METHOD).Process):
    """Hash candidates from a private stream until matched, exhausted or stopped.

    Runs in its own process. Everything it reports travels back to the
    orchestrator as WorkerEvent tuples on ``events``. Its cumulative count is
    also written to ``counts[worker_id - 1]`` after every candidate, so the
    orchestrator sees live totals between progress reports.

    Args:
        worker_id: 1-based id used in every event.
        stream:    Candidates for this worker only.
        target:    Raw digest being searched for.
        algorithm: Canonical algorithm name.
        control:   Task-wide pause/stop flags.
        events:    Queue drained by the orchestrator.
        counts:    Shared array of per-worker cumulative counts.
        winner:    Shared id of the worker that claimed the match, 0 if none.
    """

    def __init__(self, worker_id: int, stream: CandidateStream, target: bytes,
                 algorithm: str, control: SearchControl, events: Any,
                 counts: Any, winner: Any) -> None:
        super().__init__(name=f"search-worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.stream = stream
        self.target = target
        self.algorithm = algorithm
        self.control = control
        self.events = events
        self.counts = counts
        self.winner = winner

    def run(self) -> None:
        status = WorkerStatus(self.worker_id)
        exhausted = False
        self._emit(WorkerEvent.STARTED)

        try:
            exhausted = self._search(status)
        except KeyboardInterrupt:
            pass
        except Exception as e:
            self._emit(WorkerEvent.ERROR, f"{type(e).__name__}: {e}")
            raise
        finally:
            self.counts[self.worker_id - 1] = status.cumulative
            self._emit(WorkerEvent.STOPPED, status.matched, status.cumulative, exhausted)

    def _search(self, status: WorkerStatus) -> bool:
        """Run the loop. Returns True when the stream ran out of candidates."""
        control = self.control
        hasher = hasher_for(self.algorithm)
        slot = self.worker_id - 1
        last_report = time.monotonic()

        while True:
            if control.stopped:
                return False

            if control.paused:
                self._emit(WorkerEvent.STATE, WorkerState.PAUSED)
                if not control.wait_while_paused():
                    return False
                self._emit(WorkerEvent.STATE, WorkerState.RUNNING)
                continue

            candidate = next(self.stream, None)
            if candidate is None:
                return True

            found = digests_match(hasher(candidate.encode()), self.target)
            status.cumulative += 1
            status.since_last_report += 1
            status.last_candidate = candidate
            self.counts[slot] = status.cumulative

            if found:
                if self._claim_match():
                    status.matched = True
                    control.stop()
                    self._report(status, time.monotonic() - last_report)
                    self._emit(WorkerEvent.MATCH, candidate)
                return False

            interval = control.reporting_interval
            now = time.monotonic()
            if not interval or now - last_report >= interval:
                self._report(status, now - last_report)
                last_report = now

    def _claim_match(self) -> bool:
        with self.winner.get_lock():
            if self.winner.value:
                return False
            self.winner.value = self.worker_id
            return True

    def _report(self, status: WorkerStatus, elapsed: float) -> None:
        throughput = status.since_last_report / elapsed if elapsed > 0 else float(status.since_last_report)
        self._emit(WorkerEvent.PROGRESS, status.last_candidate, throughput, status.cumulative)
        status.since_last_report = 0

    def _emit(self, kind: WorkerEvent, *payload: Any) -> None:
        self.events.put((kind, self.worker_id, *payload))
