import random
import pytest

from wordsmith.services.games import words, ValidationError


def test_draw_five_distinct_words_from_pool():
    for _ in range(50):
        drawn = words.draw(5)
        assert len(drawn) == 5
        assert len(set(drawn)) == 5
        assert all(w in words.POOL for w in drawn)


def test_pool_has_no_duplicates():
    assert len(set(words.POOL)) == len(words.POOL)


def test_draw_entire_pool_is_a_permutation():
    drawn = words.draw(len(words.POOL), random.Random(3))
    assert sorted(drawn) == sorted(words.POOL)


def test_draw_more_than_pool_fails():
    with pytest.raises(ValidationError):
        words.draw(len(words.POOL) + 1)


def test_draw_negative_fails():
    with pytest.raises(ValidationError):
        words.draw(-1)


def test_seeded_rng_is_reproducible():
    assert words.draw(5, random.Random(42)) == words.draw(5, random.Random(42))


def test_draw_zero_is_empty():
    assert words.draw(0) == []
