"""
R1CS to QAP reduction over a radix-2 evaluation domain.

Rows of the constraint matrices are placed at the powers of a primitive n-th
root of unity ω. After the real constraints, one "input consistency" row per
instance variable is appended (A = that variable, B = C = 0) so the public
input polynomials are linearly independent.

Column polynomials are never interpolated explicitly. With X = IFFT([τ^i]),
X_i equals the i-th Lagrange basis polynomial at τ, so A_m(τ) = Σ_i a_im X_i
can be read off the sparse matrices directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

from ..curves import CurveConfig
from ..r1cs import ConstraintSystem
from ..merkle import next_power_of_two

Row = Dict[int, int]


def powers(base: int, count: int, modulus: int) -> List[int]:
    out = []
    acc = 1
    for _ in range(count):
        out.append(acc)
        acc = acc * base % modulus
    return out


def _fft(
    values: Sequence[Any],
    root: int,
    modulus: int,
    add: Callable,
    sub: Callable,
    scale: Callable,
) -> List[Any]:
    n = len(values)
    if n == 1:
        return [values[0]]
    root_sq = root * root % modulus
    even = _fft(values[0::2], root_sq, modulus, add, sub, scale)
    odd = _fft(values[1::2], root_sq, modulus, add, sub, scale)
    out = [None] * n
    half = n // 2
    w = 1
    for i in range(half):
        t = scale(odd[i], w)
        out[i] = add(even[i], t)
        out[i + half] = sub(even[i], t)
        w = w * root % modulus
    return out


def fft(values: Sequence[int], root: int, modulus: int) -> List[int]:
    """Evaluate coefficient vector `values` at root^0..root^(n-1)."""
    return _fft(
        list(values),
        root,
        modulus,
        lambda a, b: (a + b) % modulus,
        lambda a, b: (a - b) % modulus,
        lambda a, w: a * w % modulus,
    )


def ifft(values: Sequence[int], root: int, modulus: int) -> List[int]:
    """Inverse of `fft` over the same domain."""
    n = len(values)
    out = fft(values, pow(root, -1, modulus), modulus)
    n_inv = pow(n, -1, modulus)
    return [v * n_inv % modulus for v in out]


def coset_fft(coeffs: Sequence[int], root: int, shift: int, modulus: int) -> List[int]:
    """Evaluate at shift * root^i."""
    shifted = [c * k % modulus for c, k in zip(coeffs, powers(shift, len(coeffs), modulus))]
    return fft(shifted, root, modulus)


def coset_ifft(values: Sequence[int], root: int, shift: int, modulus: int) -> List[int]:
    coeffs = ifft(values, root, modulus)
    shift_inv = pow(shift, -1, modulus)
    return [c * k % modulus for c, k in zip(coeffs, powers(shift_inv, len(coeffs), modulus))]


def group_ifft(points: Sequence[Any], root: int, curve: CurveConfig) -> List[Any]:
    """
    IFFT over a group: given [τ^i]P, returns [L_i(τ)]P.

    Used by the universal index, where τ itself is unknown.
    """
    r = curve.scalar_modulus
    n = len(points)
    backend = curve.backend
    out = _fft(
        list(points),
        pow(root, -1, r),
        r,
        backend.add,
        lambda a, b: backend.add(a, backend.neg(b)),
        lambda p, w: curve.mul(p, w),
    )
    n_inv = pow(n, -1, r)
    return [curve.mul(p, n_inv) for p in out]


@dataclass(frozen=True)
class QAPShape:
    """
    Domain and matrices of a constraint system.

    Attributes:
        rows: (A, B, C) column maps, constraints then input consistency rows
        num_instance: Instance variables, including the constant one
        num_variables: Instance plus witness variables
        domain_size: n, a power of two >= len(rows)
    """

    rows: Tuple[Tuple[Row, Row, Row], ...]
    num_instance: int
    num_variables: int
    domain_size: int

    @classmethod
    def from_constraint_system(cls, cs: ConstraintSystem) -> "QAPShape":
        rows = list(cs.matrices())
        for i in range(cs.num_instance_variables):
            rows.append(({i: 1}, {}, {}))
        return cls(
            rows=tuple(rows),
            num_instance=cs.num_instance_variables,
            num_variables=cs.num_variables,
            domain_size=domain_size_for(cs),
        )

    def column_evaluations(self, lagrange: Sequence[Any], combine: Callable) -> Tuple[List[Any], List[Any], List[Any]]:
        """
        Σ_i coeff_im * lagrange[i] for each column m of A, B and C.

        `combine(acc, lagrange_i, coeff)` performs one accumulation step, so
        the same walk serves field scalars and group elements.
        """
        a_cols: List[Any] = [None] * self.num_variables
        b_cols: List[Any] = [None] * self.num_variables
        c_cols: List[Any] = [None] * self.num_variables
        for lag, (a, b, c) in zip(lagrange, self.rows):
            for cols, side in ((a_cols, a), (b_cols, b), (c_cols, c)):
                for m, coeff in side.items():
                    cols[m] = combine(cols[m], lag, coeff)
        return a_cols, b_cols, c_cols

    def evaluate_rows(self, assignment: Sequence[int], modulus: int) -> Tuple[List[int], List[int], List[int]]:
        """<A_i, z>, <B_i, z>, <C_i, z> per row, zero padded to the domain."""
        n = self.domain_size
        a_vals, b_vals, c_vals = [0] * n, [0] * n, [0] * n
        for i, (a, b, c) in enumerate(self.rows):
            a_vals[i] = sum(coeff * assignment[m] for m, coeff in a.items()) % modulus
            b_vals[i] = sum(coeff * assignment[m] for m, coeff in b.items()) % modulus
            c_vals[i] = sum(coeff * assignment[m] for m, coeff in c.items()) % modulus
        return a_vals, b_vals, c_vals


def domain_size_for(cs: ConstraintSystem) -> int:
    return next_power_of_two(cs.num_constraints + cs.num_instance_variables)


def lagrange_at(tau: int, domain_size: int, root: int, modulus: int) -> List[int]:
    """[L_0(τ), ..., L_{n-1}(τ)] via X = IFFT([τ^i])."""
    return ifft(powers(tau, domain_size, modulus), root, modulus)


def quotient_coefficients(
    a_vals: Sequence[int],
    b_vals: Sequence[int],
    c_vals: Sequence[int],
    curve: CurveConfig,
) -> Tuple[List[int], List[int], List[int]]:
    """
    Interpolate A, B and compute H = (A*B - C) / Z.

    Z(X) = X^n - 1 vanishes on the domain, so the division happens on the
    coset q*ω^i with q a primitive 2n-th root, where Z takes the constant
    value q^n - 1 = -2.

    Returns:
        (A coefficients, B coefficients, H coefficients)
    """
    r = curve.scalar_modulus
    n = len(a_vals)
    omega = curve.root_of_unity(n)
    shift = curve.root_of_unity(2 * n)

    a_coeffs = ifft(a_vals, omega, r)
    b_coeffs = ifft(b_vals, omega, r)
    c_coeffs = ifft(c_vals, omega, r)

    a_coset = coset_fft(a_coeffs, omega, shift, r)
    b_coset = coset_fft(b_coeffs, omega, shift, r)
    c_coset = coset_fft(c_coeffs, omega, shift, r)

    z_inv = pow((pow(shift, n, r) - 1) % r, -1, r)
    h_coset = [(a * b - c) * z_inv % r for a, b, c in zip(a_coset, b_coset, c_coset)]
    h_coeffs = coset_ifft(h_coset, omega, shift, r)
    return a_coeffs, b_coeffs, h_coeffs
