"""
Hash provider for membership trees.

Two independent hashes are used: a leaf hash over encoded member records and
a two-to-one compression hash over field elements for interior nodes. Both
are parameterized by setup randomness and bundled in MembershipParameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import MembershipConfig
from ..curves import CurveConfig, get_curve
from ..security import RandomnessSource
from .mimc import MiMCCompression, MiMCParameters, MiMCParametersVar, compress_gadget
from .pedersen import PedersenLeafHash, PedersenParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipParameters:
    """
    Hash parameters shared by the tree builder, path verifier and circuit.

    Attributes:
        curve: Curve whose scalar field all hash outputs live in
        leaf: Leaf hash parameters
        two_to_one: Compression hash parameters
    """

    curve: CurveConfig
    leaf: PedersenParameters
    two_to_one: MiMCParameters

    @property
    def modulus(self) -> int:
        return self.curve.scalar_modulus

    def leaf_hash(self, data: bytes) -> int:
        return self.leaf.evaluate(data)

    def compress(self, left: int, right: int) -> int:
        return self.two_to_one.compress(left, right)


def setup_parameters(
    curve: "str | CurveConfig | None" = None,
    rng: Optional[RandomnessSource] = None,
    config: Optional[MembershipConfig] = None,
) -> MembershipParameters:
    """
    Generate leaf and compression hash parameters.

    Args:
        curve: Curve name or CurveConfig (defaults to config.curve, or the
            ZKMEMBER_CURVE / built-in default when no config is given)
        rng: Randomness for parameter generation (secure source if omitted,
            or a seeded one when config.seed is set)
        config: Window sizes and round counts

    Returns:
        MembershipParameters bound to the curve's scalar field
    """
    if curve is None and config is not None:
        curve = config.curve
    curve_config = get_curve(curve)
    config = config or MembershipConfig(curve=curve_config.name)
    if rng is None:
        rng = RandomnessSource(seed=config.seed)

    modulus = curve_config.scalar_modulus
    leaf = PedersenLeafHash.setup(
        rng,
        modulus,
        window_size=config.leaf_window_size,
        num_windows=config.leaf_num_windows,
    )
    two_to_one = MiMCCompression.setup(rng, modulus, rounds=config.mimc_rounds)
    logger.debug(
        "Hash parameters on %s: %d leaf windows, %d MiMC rounds",
        curve_config.name,
        leaf.num_windows,
        two_to_one.rounds,
    )
    return MembershipParameters(curve=curve_config, leaf=leaf, two_to_one=two_to_one)


__all__ = [
    "MembershipParameters",
    "setup_parameters",
    "PedersenLeafHash",
    "PedersenParameters",
    "MiMCCompression",
    "MiMCParameters",
    "MiMCParametersVar",
    "compress_gadget",
]
