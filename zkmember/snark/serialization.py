"""
Transport encodings for roots, proofs, verifying keys and paths.

Proofs and verifying keys are CBOR maps tagged with a version and the curve
name. Group elements are uncompressed affine coordinates, fixed-width
big-endian; the point at infinity is all zero bytes. Decoding checks that
every point is on the curve and in the prime-order subgroup.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import cbor2

from ..config import (
    FIELD_ELEMENT_BYTES,
    MAX_PROOF_SIZE_BYTES,
    MAX_VK_SIZE_BYTES,
    PROOF_VERSION,
    SUPPORTED_CURVES,
)
from ..curves import CurveConfig, get_curve
from ..exceptions import ConfigurationError, DeserializationError, PathFormatError
from ..member import Member
from ..merkle import AuthenticationPath
from .groth16 import Proof, VerifyingKey

# ============================================================================
# HEX
# ============================================================================


def to_hex(data: bytes) -> str:
    return bytes(data).hex()


def from_hex(text: str) -> bytes:
    if not isinstance(text, str):
        raise DeserializationError("hex input must be a string")
    cleaned = text.strip()
    if cleaned.startswith(("0x", "0X")):
        cleaned = cleaned[2:]
    try:
        return bytes.fromhex(cleaned)
    except ValueError as exc:
        raise DeserializationError(f"invalid hex: {exc}") from exc


# ============================================================================
# FIELD ELEMENTS (roots, leaf hashes)
# ============================================================================


def serialize_field_element(value: int) -> bytes:
    return value.to_bytes(FIELD_ELEMENT_BYTES, "big")


def deserialize_field_element(data: bytes, curve: "str | CurveConfig | None" = None) -> int:
    """
    Raises:
        DeserializationError: If data is not 32 bytes or not below the
            curve's scalar modulus
    """
    data = _require_bytes(data, "field element")
    if len(data) != FIELD_ELEMENT_BYTES:
        raise DeserializationError(
            f"field element must be {FIELD_ELEMENT_BYTES} bytes, got {len(data)}"
        )
    value = int.from_bytes(data, "big")
    if value >= _curve(curve).scalar_modulus:
        raise DeserializationError("field element is not canonical")
    return value


serialize_root = serialize_field_element
deserialize_root = deserialize_field_element


def root_to_hex(root: int) -> str:
    return to_hex(serialize_root(root))


def root_from_hex(text: str, curve: "str | CurveConfig | None" = None) -> int:
    return deserialize_root(from_hex(text), curve)


# ============================================================================
# GROUP ELEMENTS
# ============================================================================


def _curve(curve: "str | CurveConfig | None") -> CurveConfig:
    try:
        return get_curve(curve)
    except ConfigurationError as exc:
        raise DeserializationError(str(exc)) from exc


def _require_bytes(value: Any, field: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise DeserializationError(f"{field} must be bytes")
    return bytes(value)


def _coeff(value: Any) -> int:
    return value.n if hasattr(value, "n") else int(value)


def _fq_bytes(value: int, curve: CurveConfig) -> bytes:
    return value.to_bytes(curve.base_field_bytes, "big")


def _read_fq(data: bytes, offset: int, curve: CurveConfig) -> int:
    width = curve.base_field_bytes
    value = int.from_bytes(data[offset:offset + width], "big")
    if value >= curve.base_modulus:
        raise DeserializationError("coordinate is not a canonical base field element")
    return value


def encode_g1(point: Any, curve: CurveConfig) -> bytes:
    backend = curve.backend
    if backend.is_inf(point):
        return bytes(2 * curve.base_field_bytes)
    x, y = backend.normalize(point)
    return _fq_bytes(_coeff(x), curve) + _fq_bytes(_coeff(y), curve)


def encode_g2(point: Any, curve: CurveConfig) -> bytes:
    backend = curve.backend
    if backend.is_inf(point):
        return bytes(4 * curve.base_field_bytes)
    x, y = backend.normalize(point)
    return b"".join(_fq_bytes(_coeff(c), curve) for c in (*x.coeffs, *y.coeffs))


def _in_subgroup(point: Any, curve: CurveConfig) -> bool:
    # multiply() directly: CurveConfig.mul would reduce the order to zero
    return bool(curve.backend.is_inf(curve.backend.multiply(point, curve.scalar_modulus)))


def decode_g1(data: Any, curve: CurveConfig) -> Any:
    data = _require_bytes(data, "G1 point")
    width = curve.base_field_bytes
    if len(data) != 2 * width:
        raise DeserializationError(f"G1 point must be {2 * width} bytes, got {len(data)}")
    backend = curve.backend
    if not any(data):
        return backend.Z1

    x, y = _read_fq(data, 0, curve), _read_fq(data, width, curve)
    point = (backend.FQ(x), backend.FQ(y), backend.FQ.one())
    if not backend.is_on_curve(point, backend.b):
        raise DeserializationError("G1 point is not on the curve")
    if not _in_subgroup(point, curve):
        raise DeserializationError("G1 point is not in the prime-order subgroup")
    return point


def decode_g2(data: Any, curve: CurveConfig) -> Any:
    data = _require_bytes(data, "G2 point")
    width = curve.base_field_bytes
    if len(data) != 4 * width:
        raise DeserializationError(f"G2 point must be {4 * width} bytes, got {len(data)}")
    backend = curve.backend
    if not any(data):
        return backend.Z2

    x0, x1, y0, y1 = (_read_fq(data, i * width, curve) for i in range(4))
    point = (backend.FQ2([x0, x1]), backend.FQ2([y0, y1]), backend.FQ2.one())
    if not backend.is_on_curve(point, backend.b2):
        raise DeserializationError("G2 point is not on the curve")
    if not _in_subgroup(point, curve):
        raise DeserializationError("G2 point is not in the prime-order subgroup")
    return point


# ============================================================================
# PROOFS AND VERIFYING KEYS
# ============================================================================


def _load_map(data: Any, kind: str, max_size: int) -> Dict[str, Any]:
    data = _require_bytes(data, kind)
    if len(data) > max_size:
        raise DeserializationError(f"{kind} exceeds {max_size} bytes")
    try:
        obj = cbor2.loads(data)
    except Exception as exc:
        raise DeserializationError(f"Failed to decode {kind}: {exc}") from exc
    if not isinstance(obj, dict):
        raise DeserializationError(f"{kind} must be a CBOR map")
    if obj.get("v") != PROOF_VERSION:
        raise DeserializationError(f"unsupported {kind} version: {obj.get('v')!r}")
    return obj


def _field(obj: Dict[str, Any], key: str, kind: str) -> Any:
    if key not in obj:
        raise DeserializationError(f"{kind} missing '{key}'")
    return obj[key]


def _wire_curve(obj: Dict[str, Any], kind: str, expected: "str | CurveConfig | None") -> CurveConfig:
    # encoded names are exact; no environment default applies here
    name = _field(obj, "curve", kind)
    if not isinstance(name, str) or name not in SUPPORTED_CURVES:
        raise DeserializationError(f"{kind} has unsupported curve: {name!r}")
    curve = get_curve(name)
    if expected is not None:
        wanted = _curve(expected)
        if wanted.name != curve.name:
            raise DeserializationError(f"{kind} is over {curve.name}, expected {wanted.name}")
    return curve


def serialize_proof(proof: Proof, curve: CurveConfig) -> bytes:
    return cbor2.dumps({
        "v": PROOF_VERSION,
        "curve": curve.name,
        "a": encode_g1(proof.a, curve),
        "b": encode_g2(proof.b, curve),
        "c": encode_g1(proof.c, curve),
    })


def deserialize_proof(data: bytes, expected: "str | CurveConfig | None" = None) -> Proof:
    """
    Raises:
        DeserializationError: If the encoding is malformed, names an
            unsupported curve, or names a curve other than `expected`
    """
    obj = _load_map(data, "proof", MAX_PROOF_SIZE_BYTES)
    curve = _wire_curve(obj, "proof", expected)
    return Proof(
        a=decode_g1(_field(obj, "a", "proof"), curve),
        b=decode_g2(_field(obj, "b", "proof"), curve),
        c=decode_g1(_field(obj, "c", "proof"), curve),
    )


def serialize_verifying_key(vk: VerifyingKey) -> bytes:
    curve = vk.curve
    return cbor2.dumps({
        "v": PROOF_VERSION,
        "curve": curve.name,
        "alpha_g1": encode_g1(vk.alpha_g1, curve),
        "beta_g2": encode_g2(vk.beta_g2, curve),
        "gamma_g2": encode_g2(vk.gamma_g2, curve),
        "delta_g2": encode_g2(vk.delta_g2, curve),
        "gamma_abc_g1": [encode_g1(p, curve) for p in vk.gamma_abc_g1],
    })


def deserialize_verifying_key(data: bytes, expected: "str | CurveConfig | None" = None) -> VerifyingKey:
    obj = _load_map(data, "verifying key", MAX_VK_SIZE_BYTES)
    curve = _wire_curve(obj, "verifying key", expected)
    ic = _field(obj, "gamma_abc_g1", "verifying key")
    if not isinstance(ic, list) or not ic:
        raise DeserializationError("gamma_abc_g1 must be a non-empty list")
    return VerifyingKey(
        curve=curve,
        alpha_g1=decode_g1(_field(obj, "alpha_g1", "verifying key"), curve),
        beta_g2=decode_g2(_field(obj, "beta_g2", "verifying key"), curve),
        gamma_g2=decode_g2(_field(obj, "gamma_g2", "verifying key"), curve),
        delta_g2=decode_g2(_field(obj, "delta_g2", "verifying key"), curve),
        gamma_abc_g1=tuple(decode_g1(p, curve) for p in ic),
    )


def proof_to_hex(proof: Proof, curve: CurveConfig) -> str:
    return to_hex(serialize_proof(proof, curve))


def proof_from_hex(text: str, expected: "str | CurveConfig | None" = None) -> Proof:
    return deserialize_proof(from_hex(text), expected)


def verifying_key_to_hex(vk: VerifyingKey) -> str:
    return to_hex(serialize_verifying_key(vk))


def verifying_key_from_hex(text: str, expected: "str | CurveConfig | None" = None) -> VerifyingKey:
    return deserialize_verifying_key(from_hex(text), expected)


# ============================================================================
# JSON (paths, members)
# ============================================================================


def path_to_json(path: AuthenticationPath) -> str:
    return json.dumps([
        {"sibling": root_to_hex(sibling), "is_left": is_left}
        for sibling, is_left in path.steps
    ])


def path_from_json(text: str, curve: "str | CurveConfig | None" = None) -> AuthenticationPath:
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"invalid path JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise DeserializationError("path JSON must be a list")

    steps = []
    for i, step in enumerate(raw):
        if not isinstance(step, dict) or "sibling" not in step or "is_left" not in step:
            raise DeserializationError(f"path step {i} must have 'sibling' and 'is_left'")
        steps.append((root_from_hex(step["sibling"], curve), step["is_left"]))
    try:
        return AuthenticationPath(tuple(steps))
    except PathFormatError as exc:
        raise DeserializationError(str(exc)) from exc


def members_to_json(members: List[Member]) -> str:
    return json.dumps([member.to_dict() for member in members], indent=2)


def members_from_json(text: str) -> List[Member]:
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"invalid members JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise DeserializationError("members JSON must be a list")
    try:
        return [Member.from_dict(item) for item in raw]
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"invalid member record: {exc}") from exc
