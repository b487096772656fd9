"""
Pattern language: compiler and immutable pattern tree.
"""

from hash_guesser.pattern.compiler import PatternCompiler, compile_pattern
from hash_guesser.pattern.segments import Alternation, CharClass, Literal, Pattern, Segment

__all__ = [
    "Alternation",
    "CharClass",
    "Literal",
    "Pattern",
    "PatternCompiler",
    "Segment",
    "compile_pattern",
]
