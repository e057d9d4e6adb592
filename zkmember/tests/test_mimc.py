"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for the MiMC compression hash and its gadget.
"""

import pytest

from zkmember.curves import BLS12_381, BN254
from zkmember.exceptions import ConfigurationError, EncodingError
from zkmember.hashes.mimc import MiMCCompression, MiMCParameters, MiMCParametersVar, compress_gadget
from zkmember.r1cs import ConstraintSystem
from zkmember.security import RandomnessSource

MODULUS = BN254.scalar_modulus


@pytest.fixture(scope="module")
def mimc():
    return MiMCCompression.setup(RandomnessSource(seed=3), MODULUS, rounds=6)


def _reference(params, left, right):
    p = params.modulus
    h = 0
    for m in (left, right):
        x = m
        for c in params.round_constants:
            x = pow(x + h + c, 5, p)
        h = (x + h + h + m) % p
    return h


class TestSetup:
    def test_round_count(self, mimc):
        assert mimc.rounds == 6
        assert mimc.round_constants[0] == 0

    def test_default_rounds(self):
        params = MiMCCompression.setup(RandomnessSource(seed=3), MODULUS)
        assert params.rounds == 110

    def test_both_curves_support_x5(self):
        MiMCCompression.setup(RandomnessSource(seed=3), BLS12_381.scalar_modulus, rounds=2)

    def test_rejects_non_permutation_field(self):
        # 5 divides 11 - 1
        with pytest.raises(ConfigurationError):
            MiMCCompression.setup(RandomnessSource(seed=3), 11, rounds=2)

    def test_rejects_zero_rounds(self):
        with pytest.raises(ConfigurationError):
            MiMCCompression.setup(RandomnessSource(seed=3), MODULUS, rounds=0)


class TestCompress:
    def test_matches_reference(self, mimc):
        assert mimc.compress(12, 34) == _reference(mimc, 12, 34)

    def test_order_matters(self, mimc):
        assert mimc.compress(1, 2) != mimc.compress(2, 1)

    def test_evaluate_bytes(self, mimc):
        data = (12).to_bytes(32, "big") + (34).to_bytes(32, "big")
        assert mimc.evaluate(data) == mimc.compress(12, 34)

    @pytest.mark.parametrize("length", [0, 32, 63, 65])
    def test_evaluate_rejects_wrong_length(self, mimc, length):
        with pytest.raises(EncodingError):
            mimc.evaluate(b"\x00" * length)

    def test_rejects_out_of_field(self, mimc):
        with pytest.raises(EncodingError):
            mimc.compress(MODULUS, 0)
        with pytest.raises(EncodingError):
            mimc.evaluate(b"\xff" * 64)


class TestGadget:
    def test_gadget_matches_native(self, mimc):
        cs = ConstraintSystem(MODULUS)
        consts = MiMCParametersVar.new_constant(cs, mimc)
        left = cs.alloc_witness(5)
        right = cs.alloc_input(9)
        out = compress_gadget(cs, consts, left, right)

        assert cs.value(out) == mimc.compress(5, 9)
        assert cs.is_satisfied()

    def test_three_constraints_per_round(self, mimc):
        cs = ConstraintSystem(MODULUS)
        consts = MiMCParametersVar.new_constant(cs, mimc)
        compress_gadget(cs, consts, cs.alloc_witness(1), cs.alloc_witness(2))
        assert cs.num_constraints == 2 * 3 * mimc.rounds

    def test_constants_add_no_variables(self, mimc):
        cs = ConstraintSystem(MODULUS)
        MiMCParametersVar.new_constant(cs, mimc)
        assert cs.num_variables == 1
        assert cs.num_constraints == 0

    def test_field_mismatch(self):
        params = MiMCParameters(round_constants=(0, 1), modulus=MODULUS)
        with pytest.raises(ConfigurationError):
            MiMCParametersVar.new_constant(ConstraintSystem(BLS12_381.scalar_modulus), params)
