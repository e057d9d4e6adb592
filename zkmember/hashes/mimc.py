"""
⚠️ DRAFT — requires crypto review before production use

MiMC-x^5 two-to-one compression hash and its constraint gadget.

The block cipher is

    E_k(x) = F_R(...F_1(x)) + k,   F_j(x) = (x + k + c_j)^5

and two field elements are compressed in Miyaguchi-Preneel mode:

    h_0 = 0,   h_i = E_{h_{i-1}}(m_i) + h_{i-1} + m_i

Each round costs three multiplication constraints in-circuit.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import gcd
from typing import Tuple

from ..config import FIELD_ELEMENT_BYTES, MIMC_EXPONENT, MIMC_ROUNDS
from ..exceptions import ConfigurationError, EncodingError
from ..r1cs import ConstraintSystem, LCLike, LinearCombination
from ..security import RandomnessSource


@dataclass(frozen=True)
class MiMCParameters:
    """
    Compression hash parameters.

    Attributes:
        round_constants: c_1..c_R (c_1 is zero)
        modulus: Scalar field order
    """

    round_constants: Tuple[int, ...]
    modulus: int

    @property
    def rounds(self) -> int:
        return len(self.round_constants)

    def compress(self, left: int, right: int) -> int:
        return MiMCCompression.compress(self, left, right)

    def evaluate(self, data: bytes) -> int:
        return MiMCCompression.evaluate(self, data)


def _encrypt(params: MiMCParameters, x: int, key: int) -> int:
    p = params.modulus
    for c in params.round_constants:
        x = pow((x + key + c) % p, MIMC_EXPONENT, p)
    return (x + key) % p


class MiMCCompression:
    """Compression hash capability: setup(randomness) and evaluate(parameters, bytes)."""

    @staticmethod
    def setup(
        rng: RandomnessSource,
        modulus: int,
        rounds: int = MIMC_ROUNDS,
    ) -> MiMCParameters:
        if rounds < 1:
            raise ConfigurationError("MiMC needs at least one round")
        if gcd(MIMC_EXPONENT, modulus - 1) != 1:
            raise ConfigurationError(
                f"x^{MIMC_EXPONENT} is not a permutation of this field"
            )
        constants = (0,) + tuple(
            rng.get_random_scalar(modulus) for _ in range(rounds - 1)
        )
        return MiMCParameters(round_constants=constants, modulus=modulus)

    @staticmethod
    def compress(params: MiMCParameters, left: int, right: int) -> int:
        p = params.modulus
        for value in (left, right):
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < p:
                raise EncodingError("compression input must be a canonical field element")
        h = 0
        for m in (left, right):
            h = (_encrypt(params, m, h) + h + m) % p
        return h

    @staticmethod
    def evaluate(params: MiMCParameters, data: bytes) -> int:
        """
        Compress `left ∥ right`, each a 32-byte big-endian field element.

        Raises:
            EncodingError: If data is not exactly two canonical elements
        """
        if not isinstance(data, (bytes, bytearray)) or len(data) != 2 * FIELD_ELEMENT_BYTES:
            raise EncodingError(
                f"compression input must be {2 * FIELD_ELEMENT_BYTES} bytes"
            )
        left = int.from_bytes(data[:FIELD_ELEMENT_BYTES], "big")
        right = int.from_bytes(data[FIELD_ELEMENT_BYTES:], "big")
        return MiMCCompression.compress(params, left, right)


# ============================================================================
# CONSTRAINT GADGET
# ============================================================================


class MiMCParametersVar:
    """Round constants embedded in a circuit as fixed constants."""

    def __init__(self, constants: Tuple[LinearCombination, ...]):
        self.constants = constants

    @classmethod
    def new_constant(cls, cs: ConstraintSystem, params: MiMCParameters) -> "MiMCParametersVar":
        if params.modulus != cs.modulus:
            raise ConfigurationError("MiMC parameters belong to a different field")
        return cls(tuple(cs.constant(c) for c in params.round_constants))


def _encrypt_gadget(
    cs: ConstraintSystem,
    params: MiMCParametersVar,
    x: LCLike,
    key: LCLike,
) -> LinearCombination:
    x = LinearCombination.of(x)
    for j, c in enumerate(params.constants):
        t = x + key + c
        t2 = cs.mul(t, t, f"mimc/round{j}/sq")
        t4 = cs.mul(t2, t2, f"mimc/round{j}/quad")
        x = cs.mul(t4, t, f"mimc/round{j}/pow5")
    return x + key


def compress_gadget(
    cs: ConstraintSystem,
    params: MiMCParametersVar,
    left: LCLike,
    right: LCLike,
) -> LinearCombination:
    """In-circuit equivalent of MiMCCompression.compress."""
    h = LinearCombination()
    for m in (left, right):
        h = _encrypt_gadget(cs, params, m, h) + h + m
    return h
