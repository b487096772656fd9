import random

import pytest

from hash_guesser.pattern import compile_pattern
from hash_guesser.streams import LexicographicStream, RandomStream, create_stream
from hash_guesser.errors import ConfigurationError

# (pattern, closed-form space size); each pattern spells every combination differently
PATTERNS = [
    ("[a-c]", 3),
    ("[ab]{0,2}c", 1 + 2 + 4),
    ("(x|y[0-2]){1,2}-", 4 + 4 ** 2),
    ("(Pass|pass)word[0-9]{1,2}", 2 * (10 + 100)),
    ("[A-C][7-5]{2}(!|\\?)", 3 * 9 * 2),
]


@pytest.mark.parametrize("text, size", PATTERNS)
def test_space_size_matches_enumeration(text, size):
    pattern = compile_pattern(text)
    candidates = list(LexicographicStream(pattern))
    assert pattern.space_size == size
    assert len(candidates) == size
    assert len(set(candidates)) == size
    assert all(pattern.matches(c) for c in candidates)


@pytest.mark.parametrize("text, size", PATTERNS)
def test_random_candidates_are_valid(text, size):
    pattern = compile_pattern(text)
    everything = set(LexicographicStream(pattern))
    stream = RandomStream(pattern, seed=7)
    for _ in range(300):
        candidate = next(stream)
        assert pattern.matches(candidate)
        assert candidate in everything


def test_space_size_needs_big_integers():
    pattern = compile_pattern("[a-zA-Z0-9]{20}")
    assert pattern.space_size == 62 ** 20
    assert pattern.space_size > 2 ** 64
    last = pattern.candidate_at(pattern.space_size - 1)
    assert last == "9" * 20


def test_stream_resumes_from_offset():
    pattern = compile_pattern("[a-d]{2}")
    everything = list(LexicographicStream(pattern))
    stream = LexicographicStream(pattern, start=5, stop=9)
    assert stream.offset == 5
    assert list(stream) == everything[5:9]
    assert stream.offset == 9
    assert stream.remaining == 0


def test_exhausted_stream_signals_end():
    stream = LexicographicStream(compile_pattern("[ab]"))
    assert next(stream) == "a"
    assert next(stream) == "b"
    assert next(stream, None) is None
    with pytest.raises(StopIteration):
        next(stream)


def test_stream_window_must_fit_space():
    pattern = compile_pattern("[ab]")
    with pytest.raises(ValueError):
        LexicographicStream(pattern, start=1, stop=3)


def test_candidate_at_out_of_range():
    pattern = compile_pattern("[ab]")
    with pytest.raises(IndexError):
        pattern.candidate_at(2)


def test_first_candidate():
    assert compile_pattern("(z|y)[5-9]{2,3}").first_candidate() == "z55"


def test_random_stream_never_exhausts_and_is_seeded():
    pattern = compile_pattern("[ab]")
    first = RandomStream(pattern, seed=42)
    second = RandomStream(pattern, seed=42)
    draws = [next(first) for _ in range(50)]
    assert draws == [next(second) for _ in range(50)]
    assert set(draws) == {"a", "b"}


def test_random_repeat_counts_cover_range():
    pattern = compile_pattern("x{0,3}")
    rng = random.Random(3)
    lengths = {len(pattern.random_candidate(rng)) for _ in range(200)}
    assert lengths == {0, 1, 2, 3}


def test_matches_rejects_outsiders():
    pattern = compile_pattern("(ab|cd){2}[0-1]")
    assert pattern.matches("abcd1")
    assert not pattern.matches("abcd2")
    assert not pattern.matches("ab1")


def test_create_stream_by_mode():
    pattern = compile_pattern("[ab]")
    assert isinstance(create_stream("lexicographic", pattern), LexicographicStream)
    assert isinstance(create_stream("random", pattern, seed=1), RandomStream)
    with pytest.raises(ConfigurationError):
        create_stream("bogus", pattern)
