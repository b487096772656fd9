"""
Lexicographic candidate stream
"""

from hash_guesser.pattern import Pattern

from .base_stream import CandidateStream


class LexicographicStream(CandidateStream):
    """
    Walk the offsets [start, stop) of a pattern's candidate space in order.

    Every offset is decoded straight from the pattern, so a stream can begin
    anywhere without producing the candidates before it.
    """

    def __init__(self, pattern: Pattern, start: int = 0, stop: int | None = None) -> None:
        super().__init__(pattern)
        if stop is None:
            stop = pattern.space_size
        if not 0 <= start <= stop <= pattern.space_size:
            raise ValueError(
                f"window [{start}, {stop}) is outside the candidate space "
                f"of size {pattern.space_size}")
        self.start = start
        self.stop = stop
        self._offset = start

    @property
    def offset(self) -> int:
        """Offset of the next candidate to be produced."""
        return self._offset

    @property
    def remaining(self) -> int:
        return self.stop - self._offset

    def __next__(self) -> str:
        if self._offset >= self.stop:
            raise StopIteration
        candidate = self.pattern.candidate_at(self._offset)
        self._offset += 1
        return candidate
