"""Unit tests for the R1CS builder."""

import pytest

from zkmember.exceptions import WitnessMissingError
from zkmember.r1cs import ONE, ConstraintSystem, LinearCombination

P = 97


def test_docstring_example():
    cs = ConstraintSystem(modulus=P)
    x = cs.alloc_input(3)
    y = cs.mul(x, x)
    cs.enforce_equal(y, 9)
    assert cs.is_satisfied()


def test_linear_combination_arithmetic():
    cs = ConstraintSystem(P)
    a = cs.alloc_witness(10)
    b = cs.alloc_witness(4)
    assert cs.value(a + b) == 14
    assert cs.value(a - b) == 6
    assert cs.value(3 * a) == 30
    assert cs.value(-a) == P - 10
    assert cs.value(a + 5) == 15
    assert cs.value(5 - a) == (5 - 10) % P


def test_constant_has_no_variable():
    cs = ConstraintSystem(P)
    c = cs.constant(100)
    assert c.terms == {ONE: 3}
    assert cs.num_variables == 1


def test_unsatisfied_label():
    cs = ConstraintSystem(P)
    x = cs.alloc_witness(2)
    cs.enforce(x, x, 5, "square")
    assert cs.which_is_unsatisfied() == "square"
    assert not cs.is_satisfied()


def test_boolean():
    cs = ConstraintSystem(P)
    cs.enforce_boolean(cs.alloc_witness(1))
    cs.enforce_boolean(cs.alloc_witness(0))
    assert cs.is_satisfied()

    cs.enforce_boolean(cs.alloc_witness(2), "bad_bit")
    assert cs.which_is_unsatisfied() == "bad_bit"


@pytest.mark.parametrize("a,b,expected", [(5, 5, 1), (5, 6, 0), (0, 0, 1)])
def test_is_equal(a, b, expected):
    cs = ConstraintSystem(P)
    eq = cs.is_equal(cs.alloc_witness(a), cs.alloc_input(b))
    assert cs.value(eq) == expected
    assert cs.is_satisfied()


def test_is_equal_cannot_be_forged():
    cs = ConstraintSystem(P)
    eq = cs.is_equal(cs.alloc_witness(5), cs.alloc_witness(6))
    # Claim equality for unequal values
    cs.witnesses[eq.terms.popitem()[0].index] = 1
    assert not cs.is_satisfied()


def test_missing_witness():
    cs = ConstraintSystem(P)
    x = cs.alloc_witness(None)
    y = cs.mul(x, x)
    assert cs.value(y) is None
    assert cs.has_missing_witness
    with pytest.raises(WitnessMissingError):
        cs.full_assignment()
    with pytest.raises(WitnessMissingError):
        cs.is_satisfied()


def test_shape_counts():
    cs = ConstraintSystem(P)
    x = cs.alloc_input(2)
    w = cs.alloc_witness(3)
    cs.mul(x + w, w)
    assert cs.num_constraints == 1
    assert cs.num_instance_variables == 2
    assert cs.num_witness_variables == 2
    assert cs.num_variables == 4
    assert cs.matrix_non_zero() == (2, 1, 1)
    assert cs.num_non_zero == 2


def test_assignment_order():
    cs = ConstraintSystem(P)
    cs.alloc_witness(7)
    cs.alloc_input(5)
    assert cs.instance_assignment == [1, 5]
    assert cs.full_assignment() == [1, 5, 7]


def test_matrices_use_assignment_columns():
    cs = ConstraintSystem(P)
    x = cs.alloc_input(2)
    w = cs.alloc_witness(3)
    cs.enforce(x, w, 6)
    assert cs.matrices() == [({1: 1}, {2: 1}, {0: 6})]


def test_public_input_must_be_int():
    cs = ConstraintSystem(P)
    with pytest.raises(TypeError):
        cs.alloc_input("5")


def test_lc_rejects_other_types():
    with pytest.raises(TypeError):
        LinearCombination.of(1.5)
