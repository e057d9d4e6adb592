"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for transport encodings.
"""

import cbor2
import pytest

from zkmember.config import MAX_PROOF_SIZE_BYTES, PROOF_VERSION
from zkmember.curves import BLS12_381, BN254
from zkmember.exceptions import DeserializationError
from zkmember.merkle import MembershipTree
from zkmember.snark import serialization
from zkmember.snark.groth16 import Proof, VerifyingKey

backend = BN254.backend


def _same(p, q):
    if backend.is_inf(p) or backend.is_inf(q):
        return backend.is_inf(p) and backend.is_inf(q)
    return backend.normalize(p) == backend.normalize(q)


@pytest.fixture(scope="module")
def proof():
    return Proof(
        a=BN254.mul(BN254.g1, 3),
        b=BN254.mul(BN254.g2, 5),
        c=BN254.mul(BN254.g1, 7),
    )


@pytest.fixture(scope="module")
def vk():
    return VerifyingKey(
        curve=BN254,
        alpha_g1=BN254.mul(BN254.g1, 2),
        beta_g2=BN254.g2,
        gamma_g2=BN254.mul(BN254.g2, 4),
        delta_g2=BN254.g2,
        gamma_abc_g1=(BN254.g1, BN254.zero_g1, BN254.mul(BN254.g1, 11)),
    )


class TestHex:
    def test_prefix_is_stripped(self):
        assert serialization.from_hex("0xabcd") == b"\xab\xcd"
        assert serialization.from_hex(" abcd\n") == b"\xab\xcd"

    def test_invalid_hex(self):
        with pytest.raises(DeserializationError):
            serialization.from_hex("zz")

    def test_non_string(self):
        with pytest.raises(DeserializationError):
            serialization.from_hex(b"ab")


class TestFieldElements:
    def test_root_hex_round_trip(self):
        root = BN254.scalar_modulus - 1
        text = serialization.root_to_hex(root)
        assert len(text) == 64
        assert serialization.root_from_hex(text, "bn254") == root

    def test_rejects_non_canonical(self):
        data = BN254.scalar_modulus.to_bytes(32, "big")
        with pytest.raises(DeserializationError, match="canonical"):
            serialization.deserialize_root(data, "bn254")

    def test_rejects_wrong_length(self):
        with pytest.raises(DeserializationError, match="32 bytes"):
            serialization.deserialize_root(bytes(31), "bn254")

    def test_rejects_non_bytes(self):
        with pytest.raises(DeserializationError):
            serialization.deserialize_root("00" * 32, "bn254")


class TestPoints:
    def test_g1_round_trip(self):
        point = BN254.mul(BN254.g1, 12345)
        data = serialization.encode_g1(point, BN254)
        assert len(data) == 64
        assert _same(serialization.decode_g1(data, BN254), point)

    def test_g2_round_trip(self):
        point = BN254.mul(BN254.g2, 6789)
        data = serialization.encode_g2(point, BN254)
        assert len(data) == 128
        assert _same(serialization.decode_g2(data, BN254), point)

    def test_infinity(self):
        assert serialization.encode_g1(BN254.zero_g1, BN254) == bytes(64)
        assert backend.is_inf(serialization.decode_g1(bytes(64), BN254))
        assert backend.is_inf(serialization.decode_g2(bytes(128), BN254))

    def test_off_curve_rejected(self):
        data = (1).to_bytes(32, "big") + (1).to_bytes(32, "big")
        with pytest.raises(DeserializationError, match="not on the curve"):
            serialization.decode_g1(data, BN254)

    def test_non_canonical_coordinate_rejected(self):
        data = BN254.base_modulus.to_bytes(32, "big") + (2).to_bytes(32, "big")
        with pytest.raises(DeserializationError, match="canonical"):
            serialization.decode_g1(data, BN254)

    def test_wrong_length_rejected(self):
        with pytest.raises(DeserializationError):
            serialization.decode_g2(bytes(64), BN254)


class TestProofEncoding:
    def test_round_trip(self, proof):
        decoded = serialization.deserialize_proof(serialization.serialize_proof(proof, BN254))
        assert _same(decoded.a, proof.a)
        assert _same(decoded.b, proof.b)
        assert _same(decoded.c, proof.c)

    def test_hex_round_trip(self, proof):
        text = serialization.proof_to_hex(proof, BN254)
        assert _same(serialization.proof_from_hex(text).c, proof.c)

    def test_carries_version_and_curve(self, proof):
        obj = cbor2.loads(serialization.serialize_proof(proof, BN254))
        assert obj["v"] == PROOF_VERSION
        assert obj["curve"] == "bn254"

    def test_rejects_unknown_version(self, proof):
        obj = cbor2.loads(serialization.serialize_proof(proof, BN254))
        obj["v"] = PROOF_VERSION + 1
        with pytest.raises(DeserializationError, match="version"):
            serialization.deserialize_proof(cbor2.dumps(obj))

    def test_rejects_unknown_curve(self, proof):
        obj = cbor2.loads(serialization.serialize_proof(proof, BN254))
        obj["curve"] = "secp256k1"
        with pytest.raises(DeserializationError):
            serialization.deserialize_proof(cbor2.dumps(obj))

    @pytest.mark.parametrize("name", [None, "", "BN254", "bn-254", 254])
    def test_rejects_non_canonical_curve_name(self, proof, name, monkeypatch):
        monkeypatch.setenv("ZKMEMBER_CURVE", "bn254")
        obj = cbor2.loads(serialization.serialize_proof(proof, BN254))
        obj["curve"] = name
        with pytest.raises(DeserializationError, match="curve"):
            serialization.deserialize_proof(cbor2.dumps(obj))

    def test_rejects_unexpected_curve(self):
        foreign = Proof(BLS12_381.g1, BLS12_381.g2, BLS12_381.g1)
        text = serialization.proof_to_hex(foreign, BLS12_381)
        with pytest.raises(DeserializationError, match="expected bn254"):
            serialization.proof_from_hex(text, BN254)

    def test_expected_curve_accepted(self, proof):
        data = serialization.serialize_proof(proof, BN254)
        assert _same(serialization.deserialize_proof(data, "bn254").a, proof.a)

    def test_rejects_missing_field(self, proof):
        obj = cbor2.loads(serialization.serialize_proof(proof, BN254))
        del obj["b"]
        with pytest.raises(DeserializationError, match="'b'"):
            serialization.deserialize_proof(cbor2.dumps(obj))

    def test_rejects_oversized(self):
        with pytest.raises(DeserializationError, match="exceeds"):
            serialization.deserialize_proof(bytes(MAX_PROOF_SIZE_BYTES + 1))

    def test_rejects_non_map(self):
        with pytest.raises(DeserializationError, match="map"):
            serialization.deserialize_proof(cbor2.dumps([1, 2, 3]))

    def test_rejects_garbage(self):
        with pytest.raises(DeserializationError):
            serialization.deserialize_proof(b"\xff\xff\xff")


class TestVerifyingKeyEncoding:
    def test_round_trip(self, vk):
        decoded = serialization.verifying_key_from_hex(serialization.verifying_key_to_hex(vk))
        assert decoded.curve is BN254
        assert decoded.num_public_inputs == 2
        assert _same(decoded.alpha_g1, vk.alpha_g1)
        assert _same(decoded.gamma_g2, vk.gamma_g2)
        for got, want in zip(decoded.gamma_abc_g1, vk.gamma_abc_g1):
            assert _same(got, want)

    def test_rejects_unexpected_curve(self, vk):
        with pytest.raises(DeserializationError, match="expected bls12_381"):
            serialization.verifying_key_from_hex(serialization.verifying_key_to_hex(vk), BLS12_381)

    def test_rejects_missing_curve(self, vk):
        obj = cbor2.loads(serialization.serialize_verifying_key(vk))
        obj["curve"] = None
        with pytest.raises(DeserializationError, match="curve"):
            serialization.deserialize_verifying_key(cbor2.dumps(obj))

    def test_rejects_empty_query(self, vk):
        obj = cbor2.loads(serialization.serialize_verifying_key(vk))
        obj["gamma_abc_g1"] = []
        with pytest.raises(DeserializationError, match="gamma_abc_g1"):
            serialization.deserialize_verifying_key(cbor2.dumps(obj))


class TestJSON:
    def test_path_round_trip(self, params, padding_leaf, members):
        tree = MembershipTree.from_members(members[:5], params, padding_leaf=padding_leaf)
        path = tree.generate_proof(4)
        text = serialization.path_to_json(path)
        assert serialization.path_from_json(text, "bn254") == path

    @pytest.mark.parametrize(
        "text",
        ["not json", '{"sibling": "00"}', '[{"sibling": "00"}]', '[{"sibling": "00", "is_left": 1}]'],
    )
    def test_path_rejects_malformed(self, text):
        with pytest.raises(DeserializationError):
            serialization.path_from_json(text, "bn254")

    def test_members_round_trip(self, members):
        text = serialization.members_to_json(members)
        assert serialization.members_from_json(text) == members

    def test_members_rejects_incomplete_record(self):
        with pytest.raises(DeserializationError):
            serialization.members_from_json('[{"id": "1"}]')
