from abc import abstractmethod
from collections.abc import Iterator

from hash_guesser.pattern import Pattern


class CandidateStream(Iterator[str]):
    """Lazily produces candidate strings for one worker."""

    def __init__(self, pattern: Pattern) -> None:
        self.pattern = pattern

    @abstractmethod
    def __next__(self) -> str:
        """Return the next candidate, or raise StopIteration when exhausted."""

    def __iter__(self) -> "CandidateStream":
        return self
