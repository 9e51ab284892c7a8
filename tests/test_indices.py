"""
Unit tests for the seeded index generator.
"""

import hashlib

import pytest

from stegcodec.errors import CapacityExceeded
from stegcodec.indices import SeededPRNG, derive_seed, generate_indices, iter_indices


class TestSeededPRNG:

    def test_first_draw_for_empty_seed(self):
        assert SeededPRNG("")() == pytest.approx(1013904223 / 2 ** 32)

    def test_values_in_unit_interval(self):
        prng = SeededPRNG("unit")
        assert all(0.0 <= prng() < 1.0 for _ in range(1000))

    def test_instances_do_not_share_state(self):
        a = SeededPRNG("same")
        first = a()
        a()
        a()
        assert SeededPRNG("same")() == first


class TestGenerateIndices:

    def test_deterministic(self):
        assert generate_indices("seed", 10_000, 500) == generate_indices("seed", 10_000, 500)

    def test_different_seeds_differ(self):
        assert generate_indices("a", 10_000, 50) != generate_indices("b", 10_000, 50)

    def test_distinct_and_in_range(self):
        idx = generate_indices("seed", 1_000, 800)
        assert len(set(idx)) == 800
        assert all(0 <= i < 1_000 for i in idx)

    def test_full_universe_is_permutation(self):
        assert sorted(generate_indices("perm", 257, 257)) == list(range(257))

    def test_shorter_request_is_prefix(self):
        longer = generate_indices("prefix", 5_000, 3_000)
        assert generate_indices("prefix", 5_000, 120) == longer[:120]

    def test_zero_count(self):
        assert generate_indices("seed", 10, 0) == []

    def test_count_above_universe_fails_eagerly(self):
        with pytest.raises(CapacityExceeded):
            iter_indices("seed", 10, 11)

    def test_negative_arguments(self):
        with pytest.raises(ValueError):
            generate_indices("seed", -1, 0)


class TestDeriveSeed:

    def test_password_hash(self):
        assert derive_seed("hunter2") == hashlib.sha256(b"hunter2").hexdigest()

    @pytest.mark.parametrize("password", [None, ""])
    def test_default_seed(self, password):
        assert derive_seed(password) == "default-seed"
