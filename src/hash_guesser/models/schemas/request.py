
"""Schemas for API requests."""

from typing import Optional
from pydantic import BaseModel, Field

from hash_guesser.config import DEFAULT_ALGORITHM, DEFAULT_REPORTING_INTERVAL, DEFAULT_WORKERS
from hash_guesser.models.models import SearchMode


class StartSearchRequest(BaseModel):
    """Start search request.

    hash:               Hex digest to find a plaintext for.
    pattern:            Candidate pattern, e.g. "[a-z]{1,4}".
    algorithm:          Hash algorithm name.
    workers:            Number of worker processes.
    mode:               Candidate generation mode.
    seed:               Base seed for random mode (optional).
    reporting_interval: Seconds between progress reports; 0 reports every candidate.
    extra_symbols:      Extra characters allowed inside [...] classes.
    """
    hash: str = Field(..., examples=["ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"])
    pattern: str = Field(..., examples=["[a-c]{3}"])
    algorithm: str = DEFAULT_ALGORITHM
    workers: int = Field(DEFAULT_WORKERS, ge=1)
    mode: SearchMode = SearchMode.LEXICOGRAPHIC
    seed: Optional[int] = None
    reporting_interval: Optional[float] = Field(DEFAULT_REPORTING_INTERVAL, ge=0)
    extra_symbols: str = ""


class ReportingIntervalRequest(BaseModel):
    """Reporting interval request.

    seconds: Seconds between progress reports; 0 or null reports every candidate.
    """
    seconds: Optional[float] = Field(..., ge=0)
