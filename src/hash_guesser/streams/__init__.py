"""
Candidate streams for the hash guesser.
"""

from typing import Any

from hash_guesser.errors import ConfigurationError
from hash_guesser.pattern import Pattern
from hash_guesser.streams.base_stream import CandidateStream
from hash_guesser.streams.lexicographic import LexicographicStream
from hash_guesser.streams.random_stream import RandomStream


STREAMS: dict[str, type[CandidateStream]] = {
    "lexicographic": LexicographicStream,
    "random": RandomStream,
}


def create_stream(mode: str, pattern: Pattern, **options: Any) -> CandidateStream:
    """Build the stream registered under ``mode`` for ``pattern``."""
    try:
        stream_cls = STREAMS[mode]
    except KeyError:
        raise ConfigurationError(
            f"unknown generation mode {mode!r}; expected one of {sorted(STREAMS)}") from None
    return stream_cls(pattern, **options)


__all__ = [
    "STREAMS",
    "CandidateStream",
    "LexicographicStream",
    "RandomStream",
    "create_stream",
]
