"""
⚠️ DRAFT — requires crypto review before production use

Windowed Pedersen hash over the Ed25519 prime-order group (leaf hash).

    H(m) = sum_i  m_i * G_i

where m_i is the i-th `window_size`-bit window of the message (little-endian
bit order, zero padded to capacity) and G_i are independent generators. Each
generator is the Ed25519 base point times a random non-zero scalar drawn
from setup randomness; the scalars are discarded after setup.

The output point is compressed to its 32-byte encoding and reduced into the
circuit's scalar field. Input longer than the capacity is rejected; it is
never truncated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from nacl import bindings
from nacl.exceptions import CryptoError

from ..config import LEAF_NUM_WINDOWS, LEAF_WINDOW_SIZE
from ..exceptions import ConfigurationError, EncodingError, HashInputTooLongError
from ..security import RandomnessSource

POINT_BYTES = 32
# Order of the Ed25519 prime-order subgroup
ED25519_ORDER = 2**252 + 27742317777372353535851937790883648493
# Encoding of the Ed25519 neutral element (x = 0, y = 1)
IDENTITY = b"\x01" + b"\x00" * 31


@dataclass(frozen=True)
class PedersenParameters:
    """
    Leaf hash parameters.

    Attributes:
        generators: One encoded Ed25519 point per window
        window_size: Bits per window
        modulus: Scalar field the output is reduced into
    """

    generators: Tuple[bytes, ...]
    window_size: int
    modulus: int

    @property
    def num_windows(self) -> int:
        return len(self.generators)

    @property
    def capacity_bytes(self) -> int:
        return self.window_size * self.num_windows // 8

    def evaluate(self, data: bytes) -> int:
        return PedersenLeafHash.evaluate(self, data)


class PedersenLeafHash:
    """Leaf hash capability: setup(randomness) and evaluate(parameters, bytes)."""

    @staticmethod
    def setup(
        rng: RandomnessSource,
        modulus: int,
        window_size: int = LEAF_WINDOW_SIZE,
        num_windows: int = LEAF_NUM_WINDOWS,
    ) -> PedersenParameters:
        if window_size < 1 or window_size > 252:
            raise ConfigurationError("window_size must be in [1, 252]")
        if (window_size * num_windows) % 8:
            raise ConfigurationError("window_size * num_windows must be a whole number of bytes")

        generators = []
        for _ in range(num_windows):
            try:
                scalar = rng.get_nonzero_scalar(ED25519_ORDER)
                point = bindings.crypto_scalarmult_ed25519_base_noclamp(
                    scalar.to_bytes(POINT_BYTES, "little")
                )
            except CryptoError as exc:
                raise ConfigurationError(f"Generator derivation failed: {exc}") from exc
            generators.append(point)

        return PedersenParameters(
            generators=tuple(generators),
            window_size=window_size,
            modulus=modulus,
        )

    @staticmethod
    def evaluate(params: PedersenParameters, data: bytes) -> int:
        """
        Hash `data` to a field element.

        Raises:
            EncodingError: If data is not bytes
            HashInputTooLongError: If data exceeds the parameter capacity
        """
        if not isinstance(data, (bytes, bytearray)):
            raise EncodingError("leaf hash input must be bytes")
        if len(data) > params.capacity_bytes:
            raise HashInputTooLongError(
                f"leaf hash input is {len(data)} bytes, capacity is "
                f"{params.capacity_bytes} bytes"
            )

        message = int.from_bytes(bytes(data), "little")
        mask = (1 << params.window_size) - 1
        acc = None
        try:
            for i, generator in enumerate(params.generators):
                window = (message >> (i * params.window_size)) & mask
                if window == 0:
                    continue
                term = bindings.crypto_scalarmult_ed25519_noclamp(
                    window.to_bytes(POINT_BYTES, "little"), generator
                )
                acc = term if acc is None else bindings.crypto_core_ed25519_add(acc, term)
        except CryptoError as exc:
            raise EncodingError(f"Pedersen evaluation failed: {exc}") from exc

        if acc is None:
            acc = IDENTITY
        return int.from_bytes(acc, "little") % params.modulus
