"""
Hash guesser: search for a plaintext whose digest matches a target hash,
drawing candidates from a small pattern language.
"""

from hash_guesser.cracker.orchestrator import SearchOrchestrator, SearchResult, SearchTask
from hash_guesser.cracker.sinks import LoggingProgressSink, ProgressSink, StatusBoard
from hash_guesser.errors import CompileError, ConfigurationError, HashGuesserError
from hash_guesser.pattern import Pattern, compile_pattern

__version__ = "0.1.0"

__all__ = [
    "CompileError",
    "ConfigurationError",
    "HashGuesserError",
    "LoggingProgressSink",
    "Pattern",
    "ProgressSink",
    "SearchOrchestrator",
    "SearchResult",
    "SearchTask",
    "StatusBoard",
    "compile_pattern",
]
