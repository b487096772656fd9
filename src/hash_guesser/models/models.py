"""
Models for the search engine.
"""
from enum import Enum
from typing import Optional


class SearchMode(str, Enum):
    """How candidates are generated.

    LEXICOGRAPHIC: Every candidate exactly once, in a fixed order.
    RANDOM:        Independent uniform draws, never exhausted.
    """
    LEXICOGRAPHIC = "lexicographic"
    RANDOM = "random"


class WorkerState(str, Enum):
    """State of a search worker.

    RUNNING: The worker is hashing candidates.
    PAUSED:  The worker is blocked until the search is resumed or stopped.
    STOPPED: The worker has finished. Terminal.
    """
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TaskStatus(str, Enum):
    """Status of a search task.

    PENDING:   The task has not been started.
    RUNNING:   Workers are hashing candidates.
    PAUSED:    Workers are waiting to be resumed.
    FOUND:     A worker found the plaintext.
    EXHAUSTED: Every candidate was tried without a match.
    STOPPED:   The search was stopped before finding a match.
    """
    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    STOPPED = "stopped"


class WorkerStatus:
    """Counters of one worker.

    The worker process keeps its own copy. The orchestrator mirrors it from
    the worker's events and shared count, so readers may see slightly stale
    values.

    cumulative:        Candidates tried since the worker started.
    since_last_report: Candidates tried since the last progress report.
    last_candidate:    The most recent candidate attempted.
    matched:           Whether this worker found the plaintext.
    """

    __slots__ = ("worker_id", "state", "cumulative",
                 "since_last_report", "last_candidate", "matched")

    def __init__(self, worker_id: int) -> None:
        self.worker_id = worker_id
        self.state = WorkerState.RUNNING
        self.cumulative = 0
        self.since_last_report = 0
        self.last_candidate: Optional[str] = None
        self.matched = False

    def __repr__(self) -> str:
        return (f"WorkerStatus(worker_id={self.worker_id}, state={self.state.value}, "
                f"cumulative={self.cumulative}, matched={self.matched})")


class WorkerEvent(str, Enum):
    """Kinds of messages a worker process sends to its orchestrator.

    Every message is a tuple ``(kind, worker_id, *payload)``.

    STARTED:  No payload. Sent once, before the first candidate.
    STATE:    ``(state,)``, a WorkerState the worker entered.
    PROGRESS: ``(last_candidate, throughput, cumulative)``.
    MATCH:    ``(candidate,)``. Sent only by the worker that won the task.
    ERROR:    ``(message,)``. The worker crashed; STOPPED still follows.
    STOPPED:  ``(matched, cumulative, exhausted)``. Always the last message.
    """
    STARTED = "started"
    STATE = "state"
    PROGRESS = "progress"
    MATCH = "match"
    ERROR = "error"
    STOPPED = "stopped"
