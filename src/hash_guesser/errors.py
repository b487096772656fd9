"""
Errors raised by the hash guesser.
"""


class HashGuesserError(Exception):
    """Base class for every error raised by this package."""


class CompileError(HashGuesserError):
    """A pattern could not be compiled.

    index:  Position in the pattern text where the problem was detected.
    reason: Human-readable description of the problem.
    """

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"{reason} at index {index}")
        self.index = index
        self.reason = reason


class ConfigurationError(HashGuesserError):
    """A search task was configured with values it cannot run with."""
