"""
⚠️ DRAFT — requires crypto review before production use

Randomness for parameter generation, setup and proving.

Every setup and proving call takes a RandomnessSource explicitly. Production
code uses the default (secure) source; tests pass a seed for reproducible
parameters. Nothing here reads hidden global state.
"""

import os
import random
import secrets
from typing import Optional


class RandomnessSource:
    """
    Injectable randomness with fork detection.

    Without a seed the source draws from the operating system and
    reinitializes after a fork. With a seed it is a deterministic PRNG and
    MUST NOT be used for real keys.

    Example:
        >>> rng = RandomnessSource(seed=42)
        >>> rng.get_random_scalar(17) == RandomnessSource(seed=42).get_random_scalar(17)
        True
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._pid = os.getpid()
        if seed is None:
            self._rng = secrets.SystemRandom()
        else:
            self._rng = random.Random(seed)

    @property
    def is_deterministic(self) -> bool:
        return self._seed is not None

    def _check_fork(self) -> None:
        if self._seed is None and os.getpid() != self._pid:
            self.__init__()

    def get_random_scalar(self, max_value: int) -> int:
        """
        Get random scalar in [0, max_value).

        Args:
            max_value: Upper bound (exclusive)

        Returns:
            Random scalar in [0, max_value)
        """
        self._check_fork()
        return self._rng.randrange(0, max_value)

    def get_nonzero_scalar(self, modulus: int) -> int:
        """Get random scalar in [1, modulus)."""
        self._check_fork()
        return self._rng.randrange(1, modulus)

