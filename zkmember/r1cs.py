"""
Rank-1 constraint system.

Constraints have the form <A, z> * <B, z> = <C, z> over the scalar field of
a curve, where z = (1, public inputs..., witnesses...).

Witness values are optional. A system built without them still has its full
shape (constraint and variable counts, matrices) and can be used for key
generation, but not for proving or satisfiability checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import WitnessMissingError

ONE_KIND = "one"
INPUT_KIND = "input"
WITNESS_KIND = "witness"


@dataclass(frozen=True)
class Variable:
    kind: str
    index: int


ONE = Variable(ONE_KIND, 0)


class LinearCombination:
    """Sparse mapping of variables to coefficients."""

    __slots__ = ("terms",)

    def __init__(self, terms: Optional[Dict[Variable, int]] = None):
        self.terms: Dict[Variable, int] = dict(terms) if terms else {}

    @classmethod
    def of(cls, value: "LCLike") -> "LinearCombination":
        if isinstance(value, LinearCombination):
            return value
        if isinstance(value, Variable):
            return cls({value: 1})
        if isinstance(value, int) and not isinstance(value, bool):
            return cls({ONE: value}) if value else cls()
        raise TypeError(f"Cannot build a linear combination from {type(value).__name__}")

    def _combine(self, other: "LCLike", sign: int) -> "LinearCombination":
        terms = dict(self.terms)
        for var, coeff in LinearCombination.of(other).terms.items():
            terms[var] = terms.get(var, 0) + sign * coeff
        return LinearCombination(terms)

    def __add__(self, other: "LCLike") -> "LinearCombination":
        return self._combine(other, 1)

    def __radd__(self, other: "LCLike") -> "LinearCombination":
        return self._combine(other, 1)

    def __sub__(self, other: "LCLike") -> "LinearCombination":
        return self._combine(other, -1)

    def __rsub__(self, other: "LCLike") -> "LinearCombination":
        return LinearCombination.of(other)._combine(self, -1)

    def __neg__(self) -> "LinearCombination":
        return LinearCombination({var: -coeff for var, coeff in self.terms.items()})

    def __mul__(self, scalar: int) -> "LinearCombination":
        if not isinstance(scalar, int) or isinstance(scalar, bool):
            return NotImplemented
        return LinearCombination({var: coeff * scalar for var, coeff in self.terms.items()})

    __rmul__ = __mul__

    def __repr__(self) -> str:
        parts = [f"{coeff}*{var.kind}[{var.index}]" for var, coeff in self.terms.items()]
        return f"LC({' + '.join(parts) or '0'})"


LCLike = Union[LinearCombination, Variable, int]


@dataclass(frozen=True)
class Constraint:
    a: Dict[Variable, int]
    b: Dict[Variable, int]
    c: Dict[Variable, int]
    label: str


class ConstraintSystem:
    """
    R1CS builder over the prime field of order `modulus`.

    Example:
        >>> cs = ConstraintSystem(modulus=97)
        >>> x = cs.alloc_input(3)
        >>> y = cs.mul(x, x)
        >>> cs.enforce_equal(y, 9)
        >>> cs.is_satisfied()
        True
    """

    def __init__(self, modulus: int):
        self.modulus = modulus
        self.inputs: List[int] = []
        self.witnesses: List[Optional[int]] = []
        self.constraints: List[Constraint] = []
        self._missing = 0

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    @property
    def one(self) -> LinearCombination:
        return LinearCombination({ONE: 1})

    def constant(self, value: int) -> LinearCombination:
        """Fixed value folded into linear combinations; no variable is created."""
        return LinearCombination.of(value % self.modulus)

    def alloc_input(self, value: int) -> LinearCombination:
        """Allocate a public input. Public values are always known."""
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("public input must be an int")
        self.inputs.append(value % self.modulus)
        return LinearCombination({Variable(INPUT_KIND, len(self.inputs) - 1): 1})

    def alloc_witness(self, value: Optional[int]) -> LinearCombination:
        """Allocate a private witness; None leaves it unassigned."""
        if value is None:
            self._missing += 1
        else:
            value %= self.modulus
        self.witnesses.append(value)
        return LinearCombination({Variable(WITNESS_KIND, len(self.witnesses) - 1): 1})

    @property
    def has_missing_witness(self) -> bool:
        return self._missing > 0

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def _reduce(self, lc: LCLike) -> Dict[Variable, int]:
        reduced = {}
        for var, coeff in LinearCombination.of(lc).terms.items():
            coeff %= self.modulus
            if coeff:
                reduced[var] = coeff
        return reduced

    def enforce(self, a: LCLike, b: LCLike, c: LCLike, label: str = "") -> None:
        """Add the constraint a * b = c."""
        self.constraints.append(
            Constraint(self._reduce(a), self._reduce(b), self._reduce(c), label)
        )

    def value(self, lc: LCLike) -> Optional[int]:
        """Evaluate `lc`; None if it depends on an unassigned witness."""
        total = 0
        for var, coeff in LinearCombination.of(lc).terms.items():
            if var.kind == ONE_KIND:
                assigned = 1
            elif var.kind == INPUT_KIND:
                assigned = self.inputs[var.index]
            else:
                assigned = self.witnesses[var.index]
                if assigned is None:
                    return None
            total += coeff * assigned
        return total % self.modulus

    def mul(self, a: LCLike, b: LCLike, label: str = "mul") -> LinearCombination:
        va, vb = self.value(a), self.value(b)
        product = va * vb if va is not None and vb is not None else None
        out = self.alloc_witness(product)
        self.enforce(a, b, out, label)
        return out

    def enforce_boolean(self, bit: LCLike, label: str = "boolean") -> None:
        self.enforce(bit, self.one - bit, 0, label)

    def enforce_equal(self, a: LCLike, b: LCLike, label: str = "equal") -> None:
        self.enforce(LinearCombination.of(a) - b, self.one, 0, label)

    def is_equal(self, a: LCLike, b: LCLike, label: str = "is_equal") -> LinearCombination:
        """
        Boolean that is 1 iff a == b.

        Uses the inverse trick: diff * inv = 1 - eq and diff * eq = 0.
        """
        diff = LinearCombination.of(a) - b
        dv = self.value(diff)
        if dv is None:
            inv_value = eq_value = None
        elif dv == 0:
            inv_value, eq_value = 0, 1
        else:
            inv_value, eq_value = pow(dv, -1, self.modulus), 0
        inv = self.alloc_witness(inv_value)
        eq = self.alloc_witness(eq_value)
        self.enforce(diff, inv, self.one - eq, f"{label}/inverse")
        self.enforce(diff, eq, 0, f"{label}/zero")
        return eq

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def num_instance_variables(self) -> int:
        """Public inputs plus the constant-one variable."""
        return 1 + len(self.inputs)

    @property
    def num_witness_variables(self) -> int:
        return len(self.witnesses)

    @property
    def num_variables(self) -> int:
        return self.num_instance_variables + self.num_witness_variables

    def matrix_non_zero(self) -> Tuple[int, int, int]:
        """Non-zero entries of the A, B and C matrices."""
        return (
            sum(len(c.a) for c in self.constraints),
            sum(len(c.b) for c in self.constraints),
            sum(len(c.c) for c in self.constraints),
        )

    @property
    def num_non_zero(self) -> int:
        return max(self.matrix_non_zero(), default=0)

    def column(self, var: Variable) -> int:
        """Position of `var` in the full assignment vector z."""
        if var.kind == ONE_KIND:
            return 0
        if var.kind == INPUT_KIND:
            return 1 + var.index
        return self.num_instance_variables + var.index

    def matrices(self) -> List[Tuple[Dict[int, int], Dict[int, int], Dict[int, int]]]:
        """Constraint rows as column -> coefficient maps."""
        rows = []
        for constraint in self.constraints:
            rows.append(tuple(
                {self.column(var): coeff for var, coeff in side.items()}
                for side in (constraint.a, constraint.b, constraint.c)
            ))
        return rows

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    @property
    def instance_assignment(self) -> List[int]:
        """[1, inputs...]"""
        return [1] + list(self.inputs)

    def full_assignment(self) -> List[int]:
        if self.has_missing_witness:
            raise WitnessMissingError(
                f"{self._missing} witness variable(s) have no assigned value"
            )
        return self.instance_assignment + [int(w) for w in self.witnesses]

    def _evaluate_row(self, row: Dict[Variable, int]) -> int:
        value = self.value(LinearCombination(row))
        if value is None:
            raise WitnessMissingError("constraint references an unassigned witness")
        return value

    def which_is_unsatisfied(self) -> Optional[str]:
        """
        Label of the first unsatisfied constraint, None if all hold.

        Raises:
            WitnessMissingError: If any witness is unassigned.
        """
        if self.has_missing_witness:
            raise WitnessMissingError(
                f"{self._missing} witness variable(s) have no assigned value"
            )
        for i, constraint in enumerate(self.constraints):
            a = self._evaluate_row(constraint.a)
            b = self._evaluate_row(constraint.b)
            c = self._evaluate_row(constraint.c)
            if a * b % self.modulus != c:
                return constraint.label or f"constraint[{i}]"
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None
