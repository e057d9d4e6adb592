"""
⚠️ DRAFT — requires crypto review before production use

Membership circuit: "leaf_hash is included in the tree with this root".

Public inputs, in order: root, leaf_hash.
Private witness: the authentication path (sibling and position bit per level).

Synthesis without a path still produces the complete constraint shape (all
witnesses unassigned). That system is only good for sizing and key
generation, which is why synthesis returns a tagged result instead of a
bare constraint system.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import EncodingError, PathFormatError, WitnessMissingError
from .hashes import MembershipParameters, MiMCParametersVar, compress_gadget
from .merkle import AuthenticationPath, is_field_element
from .r1cs import ConstraintSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipCircuit:
    """
    One circuit instance.

    Attributes:
        params: Hash parameters, embedded as constants
        root: Tree root (public)
        leaf_hash: Leaf being proven (public)
        authentication_path: Witness; None for sizing/setup passes
        depth: Tree depth; required when no path is given
    """

    params: MembershipParameters
    root: int
    leaf_hash: int
    authentication_path: Optional[AuthenticationPath] = None
    depth: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("root", "leaf_hash"):
            if not is_field_element(getattr(self, name), self.params.modulus):
                raise EncodingError(f"{name} is not a canonical field element")
        path = self.authentication_path
        if path is not None and not isinstance(path, AuthenticationPath):
            object.__setattr__(self, "authentication_path", AuthenticationPath(tuple(path)))
            path = self.authentication_path
        if path is None and self.depth is None:
            raise PathFormatError("depth is required when no authentication path is given")
        if path is not None and self.depth is not None and path.depth != self.depth:
            raise PathFormatError(f"path has {path.depth} levels, expected {self.depth}")

    @property
    def tree_depth(self) -> int:
        if self.authentication_path is not None:
            return self.authentication_path.depth
        return self.depth

    @classmethod
    def blank(cls, params: MembershipParameters, depth: int) -> "MembershipCircuit":
        """Instance with zero public inputs and no witness, for setup."""
        return cls(params=params, root=0, leaf_hash=0, depth=depth)


@dataclass(frozen=True)
class Synthesized:
    """Fully assigned constraint system."""

    cs: ConstraintSystem

    @property
    def is_complete(self) -> bool:
        return True

    def unwrap(self) -> ConstraintSystem:
        return self.cs


@dataclass(frozen=True)
class WitnessMissing:
    """Shape-only constraint system; not provable."""

    cs: ConstraintSystem
    reason: str

    @property
    def is_complete(self) -> bool:
        return False

    def unwrap(self) -> ConstraintSystem:
        raise WitnessMissingError(self.reason)


SynthesisResult = Union[Synthesized, WitnessMissing]


def synthesize(
    circuit: MembershipCircuit,
    cs: Optional[ConstraintSystem] = None,
) -> SynthesisResult:
    """
    Emit the membership constraints into `cs` (a fresh system if omitted).

    Returns:
        Synthesized when every witness is assigned, WitnessMissing otherwise
    """
    params = circuit.params
    if cs is None:
        cs = ConstraintSystem(params.modulus)

    mimc = MiMCParametersVar.new_constant(cs, params.two_to_one)

    root = cs.alloc_input(circuit.root)
    leaf = cs.alloc_input(circuit.leaf_hash)

    path = circuit.authentication_path
    if path is not None:
        steps = [(sibling, int(is_left)) for sibling, is_left in path.steps]
    else:
        steps = [(None, None)] * circuit.tree_depth

    current = leaf
    for level, (sibling_value, bit_value) in enumerate(steps):
        sibling = cs.alloc_witness(sibling_value)
        bit = cs.alloc_witness(bit_value)
        cs.enforce_boolean(bit, f"path/{level}/bit")

        # bit = 1 puts the sibling on the left
        p = cs.mul(bit, sibling - current, f"path/{level}/select")
        left = current + p
        right = sibling + current - left
        current = compress_gadget(cs, mimc, left, right)

    is_member = cs.is_equal(current, root, "root/is_equal")
    cs.enforce_equal(is_member, cs.one, "root/must_match")

    logger.debug(
        "Synthesized membership circuit: depth %d, %d constraints, %d witnesses",
        circuit.tree_depth,
        cs.num_constraints,
        cs.num_witness_variables,
    )

    if cs.has_missing_witness:
        return WitnessMissing(cs, "authentication path not provided")
    return Synthesized(cs)
