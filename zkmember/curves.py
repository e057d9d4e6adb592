"""
Pairing-friendly curve descriptions.

A CurveConfig names the scalar field used by circuits and the py_ecc group
implementation used by the proof backend. It is passed explicitly to tree,
circuit and backend construction so different curves can be used side by side.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType
from typing import Any, Iterable, Sequence

from py_ecc import optimized_bls12_381, optimized_bn128

from .config import resolve_curve_name
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class CurveConfig:
    """
    Field and group description for one pairing-friendly curve.

    Attributes:
        name: Curve identifier ("bn254", "bls12_381")
        backend: py_ecc optimized module implementing G1, G2 and the pairing
        generator: Multiplicative generator of the scalar field
        base_field_bytes: Byte length of a base field coordinate
    """

    name: str
    backend: ModuleType
    generator: int
    base_field_bytes: int

    @property
    def scalar_modulus(self) -> int:
        return int(self.backend.curve_order)

    @property
    def base_modulus(self) -> int:
        return int(self.backend.FQ.field_modulus)

    @property
    def two_adicity(self) -> int:
        n = self.scalar_modulus - 1
        s = 0
        while n % 2 == 0:
            n //= 2
            s += 1
        return s

    def root_of_unity(self, size: int) -> int:
        """Primitive `size`-th root of unity for a power-of-two `size`."""
        if size < 1 or size & (size - 1):
            raise ValueError("domain size must be a power of two")
        if size.bit_length() - 1 > self.two_adicity:
            raise ConfigurationError(
                f"{self.name} scalar field has no domain of size {size}"
            )
        r = self.scalar_modulus
        root = pow(self.generator, (r - 1) // size, r)
        if size > 1 and pow(root, size // 2, r) == 1:
            raise ConfigurationError(f"{self.generator} is not a generator of {self.name} Fr")
        return root

    # ------------------------------------------------------------------
    # Group helpers
    # ------------------------------------------------------------------

    @property
    def g1(self) -> Any:
        return self.backend.G1

    @property
    def g2(self) -> Any:
        return self.backend.G2

    @property
    def zero_g1(self) -> Any:
        return self.backend.Z1

    @property
    def zero_g2(self) -> Any:
        return self.backend.Z2

    def mul(self, point: Any, scalar: int) -> Any:
        return self.backend.multiply(point, scalar % self.scalar_modulus)

    def add(self, p: Any, q: Any) -> Any:
        return self.backend.add(p, q)

    def neg(self, point: Any) -> Any:
        return self.backend.neg(point)

    def is_zero(self, point: Any) -> bool:
        return bool(self.backend.is_inf(point))

    def is_g1(self, point: Any) -> bool:
        """True if `point` is a projective G1 point of this curve."""
        return self._is_point(point, self.backend.FQ, self.backend.b)

    def is_g2(self, point: Any) -> bool:
        return self._is_point(point, self.backend.FQ2, self.backend.b2)

    def _is_point(self, point: Any, field: type, b: Any) -> bool:
        if not isinstance(point, tuple) or len(point) != 3:
            return False
        if not all(isinstance(coord, field) for coord in point):
            return False
        return bool(self.backend.is_on_curve(point, b))

    def msm(self, points: Sequence[Any], scalars: Iterable[int], zero: Any) -> Any:
        """Multi-scalar multiplication, skipping zero scalars."""
        acc = zero
        r = self.scalar_modulus
        for point, scalar in zip(points, scalars):
            scalar %= r
            if scalar == 0:
                continue
            if scalar == 1:
                acc = self.backend.add(acc, point)
            else:
                acc = self.backend.add(acc, self.backend.multiply(point, scalar))
        return acc

    def pairing_product_is_one(self, pairs: Sequence[tuple[Any, Any]]) -> bool:
        """
        Check prod e(P_i, Q_i) == 1 for (G1, G2) pairs.

        Miller loops are multiplied first so only one final exponentiation
        is paid.
        """
        acc = self.backend.FQ12.one()
        for p1, q2 in pairs:
            if self.is_zero(p1) or self.is_zero(q2):
                continue
            acc = acc * self.backend.pairing(q2, p1, final_exponentiate=False)
        return self.backend.final_exponentiate(acc) == self.backend.FQ12.one()


BN254 = CurveConfig(
    name="bn254",
    backend=optimized_bn128,
    generator=5,
    base_field_bytes=32,
)

BLS12_381 = CurveConfig(
    name="bls12_381",
    backend=optimized_bls12_381,
    generator=7,
    base_field_bytes=48,
)

_CURVES = {curve.name: curve for curve in (BN254, BLS12_381)}


@lru_cache(maxsize=None)
def _lookup(name: str) -> CurveConfig:
    return _CURVES[name]


def get_curve(name: str | CurveConfig | None = None) -> CurveConfig:
    """
    Return the CurveConfig for `name`.

    Args:
        name: Curve name, an existing CurveConfig, or None for the default
            (ZKMEMBER_CURVE environment variable, then config.DEFAULT_CURVE).

    Raises:
        ConfigurationError: If the curve is not supported.
    """
    if isinstance(name, CurveConfig):
        return name
    return _lookup(resolve_curve_name(name))
