"""
Proof system adapter for membership circuits.

Drives the Groth16 backend in one of two modes:

- per-circuit: `setup` runs a trusted setup for one circuit shape (one tree
  depth).
- universal: `measure` sizes a circuit, `universal_setup` produces an SRS for
  all circuits within those bounds, and `index` derives keys from it
  (followed by `contribute` for soundness).

`prove` and `verify` are the same in both modes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..circuit import MembershipCircuit, synthesize
from ..config import NON_ZERO_CALIBRATION
from ..curves import CurveConfig, get_curve
from ..exceptions import ConfigurationError
from ..merkle import next_power_of_two
from ..r1cs import ConstraintSystem
from ..security import RandomnessSource
from . import groth16, universal
from .groth16 import Proof, ProvingKey, VerifyingKey
from .universal import UniversalSRS

logger = logging.getLogger(__name__)


class SetupMode(str, Enum):
    PER_CIRCUIT = "per_circuit"
    UNIVERSAL = "universal"


@dataclass(frozen=True)
class PublicInputs:
    """Public inputs of the membership circuit, in allocation order."""

    root: int
    leaf_hash: int

    def to_list(self) -> List[int]:
        return [self.root, self.leaf_hash]


@dataclass(frozen=True)
class CircuitSize:
    """Universal setup bounds, each a power of two."""

    num_constraints: int
    num_variables: int
    num_non_zero: int


class ProofSystemAdapter:
    """
    Setup, prove and verify membership circuits on one curve.

    Example:
        >>> adapter = ProofSystemAdapter(params.curve)
        >>> pk, vk = adapter.setup(MembershipCircuit.blank(params, tree.depth))
        >>> proof = adapter.prove(pk, circuit)
        >>> adapter.verify(vk, PublicInputs(tree.root, leaf_hash), proof)
        True
    """

    def __init__(
        self,
        curve: "str | CurveConfig | None" = None,
        mode: "SetupMode | str" = SetupMode.PER_CIRCUIT,
        non_zero_factor: int = NON_ZERO_CALIBRATION,
    ):
        self.curve = get_curve(curve)
        try:
            self.mode = SetupMode(mode)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown setup mode: {mode!r}") from exc
        if not isinstance(non_zero_factor, int) or non_zero_factor < 1:
            raise ConfigurationError("non_zero_factor must be a positive integer")
        self.non_zero_factor = non_zero_factor

    def _check_curve(self, circuit: MembershipCircuit) -> None:
        if circuit.params.curve.name != self.curve.name:
            raise ConfigurationError(
                f"circuit is over {circuit.params.curve.name}, adapter is over {self.curve.name}"
            )

    def _constraint_system(self, circuit: MembershipCircuit) -> ConstraintSystem:
        self._check_curve(circuit)
        return synthesize(circuit).cs

    def _require_mode(self, mode: SetupMode, operation: str) -> None:
        if self.mode is not mode:
            raise ConfigurationError(f"{operation} requires {mode.value} mode, adapter is {self.mode.value}")

    # ------------------------------------------------------------------
    # Per-circuit mode
    # ------------------------------------------------------------------

    def setup(
        self,
        circuit: MembershipCircuit,
        rng: Optional[RandomnessSource] = None,
    ) -> Tuple[ProvingKey, VerifyingKey]:
        """Trusted setup for the shape of `circuit`; its witness is ignored."""
        self._require_mode(SetupMode.PER_CIRCUIT, "setup")
        cs = self._constraint_system(circuit)
        return groth16.generate_parameters(cs, self.curve, rng or RandomnessSource())

    # ------------------------------------------------------------------
    # Universal mode
    # ------------------------------------------------------------------

    def measure(self, circuit: MembershipCircuit) -> CircuitSize:
        """
        Size a universal setup for `circuit`.

        The non-zero bound is non_zero_factor * constraints, raised to the
        measured count when the circuit has more.
        """
        cs = self._constraint_system(circuit)
        estimate = self.non_zero_factor * cs.num_constraints
        measured = cs.num_non_zero
        if measured > estimate:
            logger.warning(
                "Measured %d non-zero entries exceeds the %d x %d estimate; using the measurement",
                measured,
                self.non_zero_factor,
                cs.num_constraints,
            )
            estimate = measured

        size = CircuitSize(
            num_constraints=next_power_of_two(cs.num_constraints),
            num_variables=next_power_of_two(cs.num_variables),
            num_non_zero=next_power_of_two(estimate),
        )
        logger.debug("Measured circuit: %s", size)
        return size

    def universal_setup(
        self,
        size: CircuitSize,
        rng: Optional[RandomnessSource] = None,
    ) -> UniversalSRS:
        self._require_mode(SetupMode.UNIVERSAL, "universal_setup")
        return universal.universal_setup(
            self.curve,
            size.num_constraints,
            size.num_variables,
            size.num_non_zero,
            rng or RandomnessSource(),
        )

    def index(
        self,
        srs: UniversalSRS,
        circuit: MembershipCircuit,
    ) -> Tuple[ProvingKey, VerifyingKey]:
        self._require_mode(SetupMode.UNIVERSAL, "index")
        if srs.curve.name != self.curve.name:
            raise ConfigurationError("SRS curve does not match the adapter curve")
        return universal.index(srs, self._constraint_system(circuit))

    def contribute(
        self,
        pk: ProvingKey,
        vk: VerifyingKey,
        rng: Optional[RandomnessSource] = None,
    ) -> Tuple[ProvingKey, VerifyingKey]:
        self._require_mode(SetupMode.UNIVERSAL, "contribute")
        return universal.contribute(pk, vk, rng or RandomnessSource())

    # ------------------------------------------------------------------
    # Both modes
    # ------------------------------------------------------------------

    def prove(
        self,
        pk: ProvingKey,
        circuit: MembershipCircuit,
        rng: Optional[RandomnessSource] = None,
    ) -> Proof:
        """
        Raises:
            WitnessMissingError: If the circuit has no authentication path
            ProofGenerationError: If the path does not lead to the root
        """
        self._check_curve(circuit)
        cs = synthesize(circuit).unwrap()
        return groth16.create_proof(pk, cs, rng or RandomnessSource())

    def verify(self, vk: VerifyingKey, public_inputs: PublicInputs, proof: Proof) -> bool:
        if not isinstance(public_inputs, PublicInputs):
            raise TypeError(
                f"public_inputs must be PublicInputs, got {type(public_inputs).__name__}"
            )
        return groth16.verify_proof(vk, public_inputs.to_list(), proof)
