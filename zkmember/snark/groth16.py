"""
⚠️ DRAFT — requires crypto review before production use

Groth16 over any curve described by a CurveConfig.

The proving key holds plain powers of τ in G1 and G2 rather than per-variable
A/B queries; the prover interpolates A(X) and B(X) itself and commits to
their coefficients. That keeps the prover identical for keys made by a
per-circuit setup and keys indexed from a universal SRS.

Verification equation (one final exponentiation):

    e(A, B) · e(-α, β) · e(-D, γ) · e(-C, δ) == 1,   D = Σ x_i · IC_i
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from ..curves import CurveConfig
from ..exceptions import ConfigurationError, ProofGenerationError
from ..r1cs import ConstraintSystem
from ..security import RandomnessSource
from .qap import QAPShape, lagrange_at, powers, quotient_coefficients

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifyingKey:
    """
    Attributes:
        curve: Curve the key lives on
        alpha_g1, beta_g2, gamma_g2, delta_g2: Pairing check elements
        gamma_abc_g1: Public input query, one entry per instance variable
            (constant one first)
    """

    curve: CurveConfig
    alpha_g1: Any
    beta_g2: Any
    gamma_g2: Any
    delta_g2: Any
    gamma_abc_g1: Tuple[Any, ...]

    @property
    def num_public_inputs(self) -> int:
        return len(self.gamma_abc_g1) - 1


@dataclass(frozen=True)
class ProvingKey:
    """
    Attributes:
        vk: Matching verifying key
        domain_size: QAP evaluation domain size n
        beta_g1, delta_g1: G1 copies of β and δ
        tau_g1: [τ^i]_1 for i < n
        tau_g2: [τ^i]_2 for i < n
        h_query: [τ^i Z(τ) / δ]_1 for i < n - 1
        l_query: [(β A_m + α B_m + C_m)(τ) / δ]_1 for witness variables
    """

    vk: VerifyingKey
    domain_size: int
    beta_g1: Any
    delta_g1: Any
    tau_g1: Tuple[Any, ...]
    tau_g2: Tuple[Any, ...]
    h_query: Tuple[Any, ...]
    l_query: Tuple[Any, ...]

    @property
    def curve(self) -> CurveConfig:
        return self.vk.curve

    @property
    def num_instance_variables(self) -> int:
        return len(self.vk.gamma_abc_g1)


@dataclass(frozen=True)
class Proof:
    a: Any
    b: Any
    c: Any


def _sample_tau(curve: CurveConfig, domain_size: int, rng: RandomnessSource) -> int:
    r = curve.scalar_modulus
    while True:
        tau = rng.get_nonzero_scalar(r)
        # τ on the domain would make Z(τ) = 0
        if pow(tau, domain_size, r) != 1:
            return tau


def generate_parameters(
    cs: ConstraintSystem,
    curve: CurveConfig,
    rng: RandomnessSource,
) -> Tuple[ProvingKey, VerifyingKey]:
    """
    Circuit-specific trusted setup.

    Only the shape of `cs` is used, so a system synthesized without a
    witness is fine. All trapdoors are local and discarded on return.
    """
    if cs.modulus != curve.scalar_modulus:
        raise ConfigurationError("constraint system field does not match the curve")

    if rng.is_deterministic:
        logger.warning("Generating Groth16 keys from seeded randomness; keys are not secret")
    started = time.perf_counter()
    r = curve.scalar_modulus
    shape = QAPShape.from_constraint_system(cs)
    n = shape.domain_size
    omega = curve.root_of_unity(n)

    tau = _sample_tau(curve, n, rng)
    alpha, beta, gamma, delta = (rng.get_nonzero_scalar(r) for _ in range(4))
    gamma_inv = pow(gamma, -1, r)
    delta_inv = pow(delta, -1, r)

    lagrange = lagrange_at(tau, n, omega, r)
    a_cols, b_cols, c_cols = shape.column_evaluations(
        lagrange, lambda acc, lag, coeff: ((acc or 0) + lag * coeff) % r
    )
    columns = [
        (beta * (a or 0) + alpha * (b or 0) + (c or 0)) % r
        for a, b, c in zip(a_cols, b_cols, c_cols)
    ]

    g1, g2 = curve.g1, curve.g2
    vk = VerifyingKey(
        curve=curve,
        alpha_g1=curve.mul(g1, alpha),
        beta_g2=curve.mul(g2, beta),
        gamma_g2=curve.mul(g2, gamma),
        delta_g2=curve.mul(g2, delta),
        gamma_abc_g1=tuple(
            curve.mul(g1, col * gamma_inv) for col in columns[: shape.num_instance]
        ),
    )

    tau_powers = powers(tau, n, r)
    z_tau = (pow(tau, n, r) - 1) % r
    pk = ProvingKey(
        vk=vk,
        domain_size=n,
        beta_g1=curve.mul(g1, beta),
        delta_g1=curve.mul(g1, delta),
        tau_g1=tuple(curve.mul(g1, t) for t in tau_powers),
        tau_g2=tuple(curve.mul(g2, t) for t in tau_powers),
        h_query=tuple(curve.mul(g1, t * z_tau * delta_inv) for t in tau_powers[: n - 1]),
        l_query=tuple(
            curve.mul(g1, col * delta_inv) for col in columns[shape.num_instance:]
        ),
    )

    logger.debug(
        "Groth16 setup on %s: domain %d, %d variables, %.2fs",
        curve.name,
        n,
        shape.num_variables,
        time.perf_counter() - started,
    )
    return pk, vk


def create_proof(
    pk: ProvingKey,
    cs: ConstraintSystem,
    rng: RandomnessSource,
) -> Proof:
    """
    Prove that the assignment in `cs` satisfies its constraints.

    Raises:
        WitnessMissingError: If cs has unassigned witnesses
        ProofGenerationError: If cs is unsatisfied or does not match pk
    """
    curve = pk.curve
    r = curve.scalar_modulus
    assignment = cs.full_assignment()

    unsatisfied = cs.which_is_unsatisfied()
    if unsatisfied is not None:
        raise ProofGenerationError(f"constraint system is not satisfied: {unsatisfied}")

    shape = QAPShape.from_constraint_system(cs)
    if (
        shape.domain_size != pk.domain_size
        or shape.num_instance != pk.num_instance_variables
        or shape.num_variables - shape.num_instance != len(pk.l_query)
    ):
        raise ProofGenerationError("constraint system does not match the proving key")

    started = time.perf_counter()
    a_vals, b_vals, c_vals = shape.evaluate_rows(assignment, r)
    a_coeffs, b_coeffs, h_coeffs = quotient_coefficients(a_vals, b_vals, c_vals, curve)

    blind_r = rng.get_random_scalar(r)
    blind_s = rng.get_random_scalar(r)

    vk = pk.vk
    a = curve.add(vk.alpha_g1, curve.msm(pk.tau_g1, a_coeffs, curve.zero_g1))
    a = curve.add(a, curve.mul(pk.delta_g1, blind_r))

    b_g2 = curve.add(vk.beta_g2, curve.msm(pk.tau_g2, b_coeffs, curve.zero_g2))
    b_g2 = curve.add(b_g2, curve.mul(vk.delta_g2, blind_s))

    b_g1 = curve.add(pk.beta_g1, curve.msm(pk.tau_g1, b_coeffs, curve.zero_g1))
    b_g1 = curve.add(b_g1, curve.mul(pk.delta_g1, blind_s))

    c = curve.msm(pk.l_query, assignment[shape.num_instance:], curve.zero_g1)
    c = curve.add(c, curve.msm(pk.h_query, h_coeffs, curve.zero_g1))
    c = curve.add(c, curve.mul(a, blind_s))
    c = curve.add(c, curve.mul(b_g1, blind_r))
    c = curve.add(c, curve.neg(curve.mul(pk.delta_g1, blind_r * blind_s)))

    logger.debug("Groth16 proof on %s in %.2fs", curve.name, time.perf_counter() - started)
    return Proof(a=a, b=b_g2, c=c)


def verify_proof(vk: VerifyingKey, public_inputs: Sequence[int], proof: Proof) -> bool:
    """
    Check `proof` against `public_inputs` (without the constant one).

    Returns:
        True if the proof verifies, False otherwise (including a wrong
        number of inputs, inputs outside the scalar field, or proof
        elements that are not points of the key's curve)
    """
    curve = vk.curve
    if not (curve.is_g1(proof.a) and curve.is_g2(proof.b) and curve.is_g1(proof.c)):
        logger.debug("Proof elements are not %s points", curve.name)
        return False
    r = curve.scalar_modulus
    inputs = list(public_inputs)
    if len(inputs) != vk.num_public_inputs:
        return False
    for value in inputs:
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < r:
            return False

    started = time.perf_counter()
    d = curve.msm(vk.gamma_abc_g1, [1] + inputs, curve.zero_g1)
    ok = curve.pairing_product_is_one([
        (proof.a, proof.b),
        (curve.neg(vk.alpha_g1), vk.beta_g2),
        (curve.neg(d), vk.gamma_g2),
        (curve.neg(proof.c), vk.delta_g2),
    ])
    logger.debug("Groth16 verify on %s in %.2fs: %s", curve.name, time.perf_counter() - started, ok)
    return ok
