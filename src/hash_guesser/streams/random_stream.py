"""
Random candidate stream
"""

import random

from hash_guesser.pattern import Pattern

from .base_stream import CandidateStream


class RandomStream(CandidateStream):
    """
    Draw candidates uniformly per segment, forever.

    Draws are independent: the same candidate can come back, and two streams
    with different seeds can overlap.
    """

    def __init__(self, pattern: Pattern, seed: int | None = None) -> None:
        super().__init__(pattern)
        self.seed = seed
        self._rng = random.Random(seed)

    def __next__(self) -> str:
        return self.pattern.random_candidate(self._rng)
