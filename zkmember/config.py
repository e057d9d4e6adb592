"""
⚠️ DRAFT — requires crypto review before production use

Configuration for membership trees, circuits and proofs.

There is no process-wide curve selector. Callers pass a curve name (or a
CurveConfig) explicitly; `resolve_curve_name` only supplies the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Optional

import yaml

from .exceptions import ConfigurationError

# ============================================================================
# CURVE SELECTION
# ============================================================================

# Pairing-friendly curves with a py_ecc implementation. The circuit field is
# the scalar field of the chosen curve.
SUPPORTED_CURVES: Final[tuple[str, ...]] = ("bn254", "bls12_381")
DEFAULT_CURVE: Final[str] = "bn254"
CURVE_ENV_VAR: Final[str] = "ZKMEMBER_CURVE"

# ============================================================================
# LEAF HASH (Pedersen over Ed25519)
# ============================================================================

# Input capacity is WINDOW_SIZE * NUM_WINDOWS bits (96 bytes by default).
# Member encodings carry no length prefix for padding, so records must fit.
LEAF_WINDOW_SIZE = 4
LEAF_NUM_WINDOWS = 192

# ============================================================================
# COMPRESSION HASH (MiMC, Miyaguchi-Preneel)
# ============================================================================

# x^5 is a permutation of both supported scalar fields.
MIMC_EXPONENT = 5
# ceil(255 / log2(5))
MIMC_ROUNDS = 110

# ============================================================================
# BACKEND SIZING
# ============================================================================

# Non-zero matrix entries per constraint, used to size a universal setup.
# Measured for the membership circuit on this backend; the adapter raises the
# estimate when a synthesized circuit reports more.
NON_ZERO_CALIBRATION = 5

# ============================================================================
# PROOF SERIALIZATION
# ============================================================================

SERIALIZATION_FORMAT = "CBOR"
PROOF_VERSION = 1
FIELD_ELEMENT_BYTES = 32

MAX_PROOF_SIZE_BYTES = 4 * 1024
MAX_VK_SIZE_BYTES = 64 * 1024

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert DEFAULT_CURVE in SUPPORTED_CURVES, "Invalid default curve"
    assert LEAF_WINDOW_SIZE > 0 and LEAF_NUM_WINDOWS > 0, "Invalid Pedersen window"
    assert MIMC_EXPONENT == 5, "Only x^5 MiMC is supported"
    assert MIMC_ROUNDS > 0, "MiMC needs at least one round"
    assert NON_ZERO_CALIBRATION >= 1, "Calibration factor must be >= 1"
    assert SERIALIZATION_FORMAT == "CBOR", "Invalid serialization format"
    return True


# Auto-validate on import
validate_config()


def _normalize_curve(value: Optional[str], *, source: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"Invalid curve from {source}: {value!r}")
    normalized = value.strip().lower().replace("-", "_")
    if normalized not in SUPPORTED_CURVES:
        raise ConfigurationError(
            f"Invalid curve from {source}: {value!r}. "
            f"Valid options: {', '.join(SUPPORTED_CURVES)}"
        )
    return normalized


def resolve_curve_name(prefer: Optional[str] = None) -> str:
    """
    Resolve the curve name in precedence order.

    Args:
        prefer: Explicit curve name, wins over everything else.

    Returns:
        Curve name from prefer, then ZKMEMBER_CURVE, then DEFAULT_CURVE.

    Raises:
        ConfigurationError: If a provided curve name is unknown.
    """
    preferred = _normalize_curve(prefer, source="argument")
    if preferred is not None:
        return preferred

    env_curve = _normalize_curve(os.getenv(CURVE_ENV_VAR), source=CURVE_ENV_VAR)
    if env_curve is not None:
        return env_curve

    return DEFAULT_CURVE


@dataclass(frozen=True)
class MembershipConfig:
    """
    Settings needed to reproduce hash parameters and circuits.

    Attributes:
        curve: Curve name (see SUPPORTED_CURVES)
        seed: Seed for parameter generation, None for a secure source
        leaf_window_size: Pedersen window size in bits
        leaf_num_windows: Number of Pedersen windows
        mimc_rounds: MiMC round count
        non_zero_factor: Universal setup calibration constant
    """

    curve: str = DEFAULT_CURVE
    seed: Optional[int] = None
    leaf_window_size: int = LEAF_WINDOW_SIZE
    leaf_num_windows: int = LEAF_NUM_WINDOWS
    mimc_rounds: int = MIMC_ROUNDS
    non_zero_factor: int = NON_ZERO_CALIBRATION

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "curve", _normalize_curve(self.curve, source="config") or DEFAULT_CURVE
        )
        for name in ("leaf_window_size", "leaf_num_windows", "mimc_rounds", "non_zero_factor"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer")
        if self.seed is not None and (not isinstance(self.seed, int) or isinstance(self.seed, bool)):
            raise ConfigurationError("seed must be an integer")

    @property
    def leaf_capacity_bytes(self) -> int:
        return self.leaf_window_size * self.leaf_num_windows // 8

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MembershipConfig":
        if not isinstance(data, dict):
            raise ConfigurationError("config must be a mapping")
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)


def load_config(path: str | Path) -> MembershipConfig:
    """Load a MembershipConfig from a YAML file."""
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read config {path}: {exc}") from exc
    return MembershipConfig.from_dict(raw or {})
