"""
⚠️ DRAFT — requires crypto review before production use

Universal setup for the Groth16 backend.

`universal_setup` is a powers-of-tau ceremony output (phase 1) sized by
bounds on constraints, variables and non-zero entries; it knows nothing
about any circuit. `index` specializes it to one circuit without new
secrets (γ = δ = 1), so anyone holding the SRS can recompute the keys.
`contribute` then re-randomizes δ; keys are only sound after at least one
honest contribution.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Tuple

from ..curves import CurveConfig
from ..exceptions import CircuitTooLargeError, ConfigurationError
from ..merkle import next_power_of_two
from ..r1cs import ConstraintSystem
from ..security import RandomnessSource
from .groth16 import ProvingKey, VerifyingKey
from .qap import QAPShape, group_ifft, powers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniversalSRS:
    """
    Powers of a secret τ under secrets α, β.

    Attributes:
        curve: Curve the SRS lives on
        max_constraints, max_variables, max_non_zero: Circuit bounds
        tau_g1: [τ^i]_1 for i < 2D
        tau_g2: [τ^i]_2 for i < D
        alpha_tau_g1: [α τ^i]_1 for i < D
        beta_tau_g1: [β τ^i]_1 for i < D
        beta_g2: [β]_2
    """

    curve: CurveConfig
    max_constraints: int
    max_variables: int
    max_non_zero: int
    tau_g1: Tuple[Any, ...]
    tau_g2: Tuple[Any, ...]
    alpha_tau_g1: Tuple[Any, ...]
    beta_tau_g1: Tuple[Any, ...]
    beta_g2: Any

    @property
    def max_domain_size(self) -> int:
        return len(self.tau_g2)


def universal_setup(
    curve: CurveConfig,
    max_constraints: int,
    max_variables: int,
    max_non_zero: int,
    rng: RandomnessSource,
) -> UniversalSRS:
    """
    Generate an SRS for every circuit within the given bounds.

    The evaluation domain must hold constraints plus instance rows, so it is
    sized to next_power_of_two(max_constraints + max_variables).
    """
    for name, value in (
        ("max_constraints", max_constraints),
        ("max_variables", max_variables),
        ("max_non_zero", max_non_zero),
    ):
        if not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"{name} must be a positive integer")

    if rng.is_deterministic:
        logger.warning("Generating a universal SRS from seeded randomness; trapdoor is not secret")
    started = time.perf_counter()
    r = curve.scalar_modulus
    domain = next_power_of_two(max_constraints + max_variables)
    curve.root_of_unity(domain)

    tau = rng.get_nonzero_scalar(r)
    alpha = rng.get_nonzero_scalar(r)
    beta = rng.get_nonzero_scalar(r)

    g1, g2 = curve.g1, curve.g2
    tau_powers = powers(tau, 2 * domain, r)
    srs = UniversalSRS(
        curve=curve,
        max_constraints=max_constraints,
        max_variables=max_variables,
        max_non_zero=max_non_zero,
        tau_g1=tuple(curve.mul(g1, t) for t in tau_powers),
        tau_g2=tuple(curve.mul(g2, t) for t in tau_powers[:domain]),
        alpha_tau_g1=tuple(curve.mul(g1, alpha * t) for t in tau_powers[:domain]),
        beta_tau_g1=tuple(curve.mul(g1, beta * t) for t in tau_powers[:domain]),
        beta_g2=curve.mul(g2, beta),
    )
    logger.debug(
        "Universal SRS on %s: domain %d (C=%d, V=%d, Z=%d), %.2fs",
        curve.name,
        domain,
        max_constraints,
        max_variables,
        max_non_zero,
        time.perf_counter() - started,
    )
    return srs


def _check_bounds(srs: UniversalSRS, cs: ConstraintSystem) -> None:
    if cs.modulus != srs.curve.scalar_modulus:
        raise ConfigurationError("constraint system field does not match the SRS curve")
    checks = (
        ("constraints", cs.num_constraints, srs.max_constraints),
        ("variables", cs.num_variables, srs.max_variables),
        ("non-zero entries", cs.num_non_zero, srs.max_non_zero),
    )
    for what, actual, bound in checks:
        if actual > bound:
            raise CircuitTooLargeError(
                f"circuit has {actual} {what}, SRS supports at most {bound}"
            )


def index(srs: UniversalSRS, cs: ConstraintSystem) -> Tuple[ProvingKey, VerifyingKey]:
    """
    Derive circuit keys from the SRS. Deterministic.

    Raises:
        CircuitTooLargeError: If the circuit exceeds any SRS bound
    """
    _check_bounds(srs, cs)
    started = time.perf_counter()
    curve = srs.curve
    shape = QAPShape.from_constraint_system(cs)
    n = shape.domain_size
    if n > srs.max_domain_size:
        raise CircuitTooLargeError(
            f"circuit needs a domain of {n}, SRS supports {srs.max_domain_size}"
        )
    omega = curve.root_of_unity(n)

    # [L_i(τ)], [α L_i(τ)], [β L_i(τ)] over this circuit's domain
    lag = group_ifft(srs.tau_g1[:n], omega, curve)
    alpha_lag = group_ifft(srs.alpha_tau_g1[:n], omega, curve)
    beta_lag = group_ifft(srs.beta_tau_g1[:n], omega, curve)

    # [(β A_m + α B_m + C_m)(τ)] for every variable m
    columns: List[Any] = [curve.zero_g1] * shape.num_variables
    for i, (a, b, c) in enumerate(shape.rows):
        for side, basis in ((a, beta_lag), (b, alpha_lag), (c, lag)):
            for m, coeff in side.items():
                columns[m] = curve.add(columns[m], curve.mul(basis[i], coeff))

    g1, g2 = curve.g1, curve.g2
    vk = VerifyingKey(
        curve=curve,
        alpha_g1=srs.alpha_tau_g1[0],
        beta_g2=srs.beta_g2,
        gamma_g2=g2,
        delta_g2=g2,
        gamma_abc_g1=tuple(columns[: shape.num_instance]),
    )
    pk = ProvingKey(
        vk=vk,
        domain_size=n,
        beta_g1=srs.beta_tau_g1[0],
        delta_g1=g1,
        tau_g1=tuple(srs.tau_g1[:n]),
        tau_g2=tuple(srs.tau_g2[:n]),
        # [τ^i Z(τ)] = [τ^(i+n)] - [τ^i]
        h_query=tuple(
            curve.add(srs.tau_g1[i + n], curve.neg(srs.tau_g1[i])) for i in range(n - 1)
        ),
        l_query=tuple(columns[shape.num_instance:]),
    )
    logger.debug(
        "Indexed circuit on %s: domain %d of %d, %.2fs",
        curve.name,
        n,
        srs.max_domain_size,
        time.perf_counter() - started,
    )
    return pk, vk


def contribute(
    pk: ProvingKey,
    vk: VerifyingKey,
    rng: RandomnessSource,
) -> Tuple[ProvingKey, VerifyingKey]:
    """
    Phase-2 update: multiply δ by a fresh secret.

    The H and L queries are divided by the same secret, so proofs under the
    new keys verify exactly as before.
    """
    curve = pk.curve
    r = curve.scalar_modulus
    secret = rng.get_nonzero_scalar(r)
    inverse = pow(secret, -1, r)

    new_vk = VerifyingKey(
        curve=curve,
        alpha_g1=vk.alpha_g1,
        beta_g2=vk.beta_g2,
        gamma_g2=vk.gamma_g2,
        delta_g2=curve.mul(vk.delta_g2, secret),
        gamma_abc_g1=vk.gamma_abc_g1,
    )
    new_pk = ProvingKey(
        vk=new_vk,
        domain_size=pk.domain_size,
        beta_g1=pk.beta_g1,
        delta_g1=curve.mul(pk.delta_g1, secret),
        tau_g1=pk.tau_g1,
        tau_g2=pk.tau_g2,
        h_query=tuple(curve.mul(p, inverse) for p in pk.h_query),
        l_query=tuple(curve.mul(p, inverse) for p in pk.l_query),
    )
    logger.debug("Applied phase-2 contribution on %s", curve.name)
    return new_pk, new_vk
