"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for security utilities module.
"""

import os

from zkmember import security


class TestRandomnessSource:
    """Test randomness source."""

    def test_init(self):
        rng = security.RandomnessSource()
        assert rng._pid == os.getpid()
        assert not rng.is_deterministic

    def test_get_random_scalar(self):
        rng = security.RandomnessSource()
        scalar = rng.get_random_scalar(1000)
        assert 0 <= scalar < 1000

    def test_nonzero_scalar(self):
        rng = security.RandomnessSource()
        assert all(1 <= rng.get_nonzero_scalar(3) < 3 for _ in range(50))

    def test_seeded_is_reproducible(self):
        a = security.RandomnessSource(seed=42)
        b = security.RandomnessSource(seed=42)
        assert a.is_deterministic
        assert a.get_random_scalar(2**255) == b.get_random_scalar(2**255)

    def test_different_seeds_differ(self):
        a = security.RandomnessSource(seed=1)
        b = security.RandomnessSource(seed=2)
        assert a.get_random_scalar(2**255) != b.get_random_scalar(2**255)

