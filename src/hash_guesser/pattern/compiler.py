"""
Pattern compiler.

Turns pattern text such as ``(Pass|pass)word[0-9]{1,3}!`` into an immutable
Pattern tree. The parser is a single left-to-right pass; any problem raises
CompileError with the offending index and nothing is returned.
"""
from __future__ import annotations

import logging
import re
import string
from typing import Optional

from hash_guesser.config import CLASS_ALPHABET
from hash_guesser.errors import CompileError
from hash_guesser.pattern.segments import Alternation, CharClass, Literal, Pattern, Segment

logger = logging.getLogger(__name__)

_BOUNDS = re.compile(r"(\d+)(?:,(\d+))?", re.ASCII)
_RANGE_KINDS = (string.ascii_lowercase, string.ascii_uppercase, string.digits)


def compile_pattern(text: str, extra_symbols: str = "") -> Pattern:
    """Compile ``text`` into a Pattern.

    Args:
        text:          The pattern source.
        extra_symbols: Characters allowed inside ``[...]`` on top of the
                       default class alphabet.

    Raises:
        CompileError: The pattern is malformed.
    """
    pattern = PatternCompiler(text, CLASS_ALPHABET + extra_symbols).compile()
    logger.debug(
        f"compiled {text!r}: {len(pattern)} segments, space size {pattern.space_size}")
    return pattern


class PatternCompiler:
    def __init__(self, text: str, alphabet: str = CLASS_ALPHABET) -> None:
        self.text = text
        self.alphabet = frozenset(alphabet)
        self.pos = 0

    def compile(self) -> Pattern:
        alternatives = self._parse_alternatives(group_start=None)
        if len(alternatives) == 1:
            return alternatives[0]
        return Pattern((Alternation(tuple(alternatives)),))

    # ------------------------------------------------------------------

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return None

    def _parse_alternatives(self, group_start: Optional[int]) -> list[Pattern]:
        """Parse ``|``-separated sequences until ``)`` or end of text.

        The closing parenthesis is left for the caller.
        """
        alternatives: list[Pattern] = []
        segments: list[Segment] = []

        while (char := self._peek()) is not None:
            if char == "|":
                alternatives.append(Pattern(tuple(segments)))
                segments = []
                self.pos += 1
                continue
            if char == ")":
                if group_start is None:
                    raise CompileError(self.pos, "unexpected ')'")
                break
            if char == "{":
                if not segments:
                    raise CompileError(
                        self.pos, "repetition brace follows an empty expression")
                raise CompileError(
                    self.pos, "repetition brace follows an already repeated expression")
            if char in "]}":
                raise CompileError(self.pos, f"unexpected '{char}'")

            if char == "(":
                segment: Segment = self._parse_group()
            elif char == "[":
                segment = self._parse_class()
            elif char == "\\":
                segment = Literal(self._parse_escape())
            else:
                segment = Literal(char)
                self.pos += 1

            segments.append(self._apply_repetition(segment))

        alternatives.append(Pattern(tuple(segments)))
        return alternatives

    def _parse_group(self) -> Alternation:
        start = self.pos
        self.pos += 1
        alternatives = self._parse_alternatives(group_start=start)
        if self._peek() != ")":
            raise CompileError(start, "unterminated '('")
        self.pos += 1
        return Alternation(tuple(alternatives))

    def _parse_escape(self) -> str:
        if self.pos + 1 >= len(self.text):
            raise CompileError(self.pos, "trailing escape character")
        char = self.text[self.pos + 1]
        self.pos += 2
        return char

    def _parse_class(self) -> CharClass:
        start = self.pos
        self.pos += 1
        members: list[str] = []

        while True:
            char = self._peek()
            if char is None:
                raise CompileError(start, "unterminated '['")
            if char == "]":
                self.pos += 1
                break
            if char == "-":
                raise CompileError(self.pos, "'-' without a range start")

            low_index = self.pos
            low, low_escaped = self._class_member()
            if self._peek() != "-":
                if not low_escaped:
                    self._check_alphabet(low, low_index)
                members.append(low)
                continue

            dash = self.pos
            self.pos += 1
            if self._peek() in (None, "]"):
                raise CompileError(dash, "'-' without a range end")
            high, _ = self._class_member()
            members.extend(self._expand_range(low, high, low_index))

        if not members:
            raise CompileError(start, "empty character class")
        return CharClass("".join(dict.fromkeys(members)))

    def _class_member(self) -> tuple[str, bool]:
        if self._peek() == "\\":
            return self._parse_escape(), True
        char = self.text[self.pos]
        self.pos += 1
        return char, False

    def _check_alphabet(self, char: str, index: int) -> None:
        if char not in self.alphabet:
            raise CompileError(index, f"character {char!r} is not allowed in a class")

    @staticmethod
    def _expand_range(low: str, high: str, index: int) -> list[str]:
        if not any(low in kind and high in kind for kind in _RANGE_KINDS):
            raise CompileError(
                index, f"invalid range {low}-{high}: endpoints must both be "
                       "lowercase letters, uppercase letters or digits")
        step = 1 if high >= low else -1
        return [chr(code) for code in range(ord(low), ord(high) + step, step)]

    def _apply_repetition(self, segment: Segment) -> Segment:
        if self._peek() != "{":
            return segment
        if isinstance(segment, Alternation) and all(_only_empty(alt) for alt in segment.alternatives):
            raise CompileError(self.pos, "repetition brace follows an empty expression")

        start = self.pos
        end = self.text.find("}", start)
        if end == -1:
            raise CompileError(start, "unterminated '{'")
        body = self.text[start + 1:end]
        match = _BOUNDS.fullmatch(body)
        if match is None:
            raise CompileError(start, f"invalid repetition bounds '{{{body}}}'")
        min_repeat = int(match.group(1))
        max_repeat = int(match.group(2)) if match.group(2) is not None else min_repeat
        if min_repeat > max_repeat:
            raise CompileError(
                start, f"repetition minimum {min_repeat} exceeds maximum {max_repeat}")
        self.pos = end + 1

        if isinstance(segment, Literal):
            return CharClass(segment.char, min_repeat, max_repeat)
        if isinstance(segment, CharClass):
            return CharClass(segment.chars, min_repeat, max_repeat)
        return Alternation(segment.alternatives, min_repeat, max_repeat)


def _only_empty(pattern: Pattern) -> bool:
    """Whether every candidate of ``pattern`` is the empty string."""
    for segment in pattern.segments:
        if isinstance(segment, Literal):
            return False
        if segment.max_repeat == 0:
            continue
        if isinstance(segment, CharClass):
            return False
        if not all(_only_empty(alt) for alt in segment.alternatives):
            return False
    return True
