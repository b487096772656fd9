
"""Schemas for API responses."""

from typing import Optional
from pydantic import BaseModel

from hash_guesser.models.models import TaskStatus


class AlgorithmInfo(BaseModel):
    name: str
    digest_size: int


class StartSearchResponse(BaseModel):
    """Start search response.

    status:     Status of the new task.
    workers:    Number of workers started.
    space_size: Number of lexicographic candidates, as a decimal string.
    """
    status: TaskStatus
    workers: int
    space_size: str


class ControlResponse(BaseModel):
    status: TaskStatus


class WorkerRow(BaseModel):
    """One row of the worker table.

    worker_id:      1-based worker id.
    last_candidate: Most recently reported candidate.
    rate:           Candidates per second over the last report window.
    total:          Candidates tried so far.
    state:          running / paused / stopped.
    matched:        Whether this worker found the plaintext.
    """
    worker_id: int
    last_candidate: str
    rate: float
    total: int
    state: str
    matched: bool


class SearchStatusResponse(BaseModel):
    """Search status response.

    status:           Task status.
    status_line:      One-line summary for display.
    algorithm:        Hash algorithm in use.
    mode:             Generation mode.
    space_size:       Lexicographic candidate count, as a decimal string.
    total_candidates: Candidates tried by all workers.
    plaintext:        The matching plaintext, once found.
    workers:          Per-worker rows.
    """
    status: TaskStatus
    status_line: str
    algorithm: str
    mode: str
    space_size: str
    total_candidates: int
    plaintext: Optional[str] = None
    workers: list[WorkerRow]
