"""Groth16 proof backend and the membership proof system adapter."""

from .adapter import CircuitSize, ProofSystemAdapter, PublicInputs, SetupMode
from .groth16 import Proof, ProvingKey, VerifyingKey
from .universal import UniversalSRS

__all__ = [
    "CircuitSize",
    "ProofSystemAdapter",
    "PublicInputs",
    "SetupMode",
    "Proof",
    "ProvingKey",
    "VerifyingKey",
    "UniversalSRS",
]
