"""Zero-knowledge membership proofs over hashed member registries.

⚠️ DRAFT — requires crypto review before production use.
"""

from __future__ import annotations

from .circuit import MembershipCircuit, Synthesized, SynthesisResult, WitnessMissing, synthesize
from .config import MembershipConfig, load_config
from .curves import BLS12_381, BN254, CurveConfig, get_curve
from .hashes import MembershipParameters, setup_parameters
from .member import Member, encode_member, generate_members
from .merkle import AuthenticationPath, MembershipTree, build_tree, verify_path
from .security import RandomnessSource
from .snark import CircuitSize, ProofSystemAdapter, PublicInputs, SetupMode

__version__ = "0.1.0"

__all__ = [
    "MembershipCircuit",
    "Synthesized",
    "SynthesisResult",
    "WitnessMissing",
    "synthesize",
    "MembershipConfig",
    "load_config",
    "BLS12_381",
    "BN254",
    "CurveConfig",
    "get_curve",
    "MembershipParameters",
    "setup_parameters",
    "Member",
    "encode_member",
    "generate_members",
    "AuthenticationPath",
    "MembershipTree",
    "build_tree",
    "verify_path",
    "RandomnessSource",
    "CircuitSize",
    "ProofSystemAdapter",
    "PublicInputs",
    "SetupMode",
]
