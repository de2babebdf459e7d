"""Tests for deterministic shuffling."""

import random

from mystic_oracle.utils.rng import fisher_yates_shuffle, seeded_random, shuffle_deck


class TestRNGDeterminism:
    """Test deterministic RNG behavior."""

    def test_seeded_random_deterministic(self):
        """Same seed and salt should produce same sequence."""
        rng1 = seeded_random("test_seed", "test_salt")
        rng2 = seeded_random("test_seed", "test_salt")

        assert [rng1.random() for _ in range(10)] == [rng2.random() for _ in range(10)]

    def test_seeded_random_different_salts(self):
        rng1 = seeded_random("seed", "salt1")
        rng2 = seeded_random("seed", "salt2")

        assert [rng1.random() for _ in range(10)] != [rng2.random() for _ in range(10)]

    def test_shuffle_deck_deterministic(self):
        deck = ["card1", "card2", "card3", "card4", "card5"]

        shuffled1 = shuffle_deck(deck, "seed", "salt")
        shuffled2 = shuffle_deck(deck, "seed", "salt")

        assert shuffled1 == shuffled2
        assert sorted(shuffled1) == sorted(deck)


def test_shuffle_does_not_mutate_input():
    items = list(range(20))
    out = fisher_yates_shuffle(items, random.Random(1))
    assert items == list(range(20))
    assert sorted(out) == items


def test_shuffle_short_inputs():
    assert fisher_yates_shuffle([]) == []
    assert fisher_yates_shuffle(["only"]) == ["only"]
