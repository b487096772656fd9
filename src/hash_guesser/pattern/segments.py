"""
Immutable pattern tree produced by the compiler.

A Pattern is a tuple of segments. Every node knows the size of its own
candidate space, computed once when the node is built, so enumeration can
decode any offset directly:

    Literal        one fixed character, space size 1
    CharClass      one member per slot, min..max slots
    Alternation    one alternative per slot, min..max slots

For a repeated node with ``c`` choices per slot the space size is
``sum(c ** k for k in range(min, max + 1))``. A Pattern's size is the
product of its segments' sizes.
"""
from __future__ import annotations

import functools
import random
import re
from dataclasses import dataclass, field
from typing import Union


@functools.lru_cache(maxsize=64)
def _compiled_regex(expression: str) -> re.Pattern:
    return re.compile(expression, re.DOTALL)


def _quantifier(min_repeat: int, max_repeat: int) -> str:
    if min_repeat == max_repeat == 1:
        return ""
    if min_repeat == max_repeat:
        return f"{{{min_repeat}}}"
    return f"{{{min_repeat},{max_repeat}}}"


@dataclass(frozen=True)
class Literal:
    char: str
    space_size: int = field(default=1, init=False, repr=False, compare=False)

    def render(self, offset: int, out: list[str]) -> None:
        out.append(self.char)

    def render_random(self, rng: random.Random, out: list[str]) -> None:
        out.append(self.char)

    def to_regex(self) -> str:
        return re.escape(self.char)


class _Repeated:
    """Repetition arithmetic shared by CharClass and Alternation.

    The instantiation of a repeated node is (count, slot choices). Counts are
    ordered ascending; for a given count the slots form a base-``choices``
    number whose rightmost slot varies fastest.
    """

    min_repeat: int
    max_repeat: int
    slot_choices: int
    space_size: int

    def _init_space(self, slot_choices: int) -> None:
        if self.min_repeat < 0 or self.max_repeat < self.min_repeat:
            raise ValueError(
                f"invalid repetition bounds {{{self.min_repeat},{self.max_repeat}}}")
        size = sum(slot_choices ** count
                   for count in range(self.min_repeat, self.max_repeat + 1))
        object.__setattr__(self, "slot_choices", slot_choices)
        object.__setattr__(self, "space_size", size)

    def render(self, offset: int, out: list[str]) -> None:
        choices = self.slot_choices
        count = self.min_repeat
        while count < self.max_repeat:
            block = choices ** count
            if offset < block:
                break
            offset -= block
            count += 1

        digits = []
        for _ in range(count):
            offset, digit = divmod(offset, choices)
            digits.append(digit)
        for digit in reversed(digits):
            self._render_slot(digit, out)

    def render_random(self, rng: random.Random, out: list[str]) -> None:
        for _ in range(rng.randint(self.min_repeat, self.max_repeat)):
            self._random_slot(rng, out)

    def _render_slot(self, digit: int, out: list[str]) -> None:
        raise NotImplementedError

    def _random_slot(self, rng: random.Random, out: list[str]) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class CharClass(_Repeated):
    chars: str
    min_repeat: int = 1
    max_repeat: int = 1
    slot_choices: int = field(default=0, init=False, repr=False, compare=False)
    space_size: int = field(default=0, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.chars:
            raise ValueError("a character class needs at least one member")
        if len(set(self.chars)) != len(self.chars):
            raise ValueError("character class members must be distinct")
        self._init_space(len(self.chars))

    def _render_slot(self, digit: int, out: list[str]) -> None:
        out.append(self.chars[digit])

    def _random_slot(self, rng: random.Random, out: list[str]) -> None:
        out.append(rng.choice(self.chars))

    def to_regex(self) -> str:
        members = "".join(re.escape(c) for c in self.chars)
        return f"[{members}]" + _quantifier(self.min_repeat, self.max_repeat)


@dataclass(frozen=True)
class Alternation(_Repeated):
    alternatives: tuple[Pattern, ...]
    min_repeat: int = 1
    max_repeat: int = 1
    slot_choices: int = field(default=0, init=False, repr=False, compare=False)
    space_size: int = field(default=0, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.alternatives:
            raise ValueError("an alternation needs at least one alternative")
        self._init_space(sum(alt.space_size for alt in self.alternatives))

    def _render_slot(self, digit: int, out: list[str]) -> None:
        for alternative in self.alternatives:
            if digit < alternative.space_size:
                alternative.render(digit, out)
                return
            digit -= alternative.space_size

    def _random_slot(self, rng: random.Random, out: list[str]) -> None:
        rng.choice(self.alternatives).render_random(rng, out)

    def to_regex(self) -> str:
        body = "|".join(alt.to_regex() for alt in self.alternatives)
        return f"(?:{body})" + _quantifier(self.min_repeat, self.max_repeat)


Segment = Union[Literal, CharClass, Alternation]


@dataclass(frozen=True)
class Pattern:
    """A compiled pattern: an ordered, immutable sequence of segments."""

    segments: tuple[Segment, ...] = ()
    space_size: int = field(default=1, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        size = 1
        for segment in self.segments:
            size *= segment.space_size
        object.__setattr__(self, "space_size", size)

    def __len__(self) -> int:
        return len(self.segments)

    def render(self, offset: int, out: list[str]) -> None:
        # rightmost segment is the least significant digit
        digits = []
        for segment in reversed(self.segments):
            offset, digit = divmod(offset, segment.space_size)
            digits.append(digit)
        for segment, digit in zip(self.segments, reversed(digits)):
            segment.render(digit, out)

    def render_random(self, rng: random.Random, out: list[str]) -> None:
        for segment in self.segments:
            segment.render_random(rng, out)

    def candidate_at(self, offset: int) -> str:
        """Return the candidate at ``offset`` in lexicographic order."""
        if not 0 <= offset < self.space_size:
            raise IndexError(
                f"offset {offset} outside candidate space of size {self.space_size}")
        out: list[str] = []
        self.render(offset, out)
        return "".join(out)

    def first_candidate(self) -> str:
        return self.candidate_at(0)

    def random_candidate(self, rng: random.Random) -> str:
        out: list[str] = []
        self.render_random(rng, out)
        return "".join(out)

    def to_regex(self) -> str:
        return "".join(segment.to_regex() for segment in self.segments)

    def matches(self, text: str) -> bool:
        """True when ``text`` is one of this pattern's candidates."""
        return _compiled_regex(self.to_regex()).fullmatch(text) is not None
