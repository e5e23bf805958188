"""Conversion between raw 65-byte signatures and {v, r, s}.

Raw layout: r(32) + s(32) + recovery id(1), where the recovery id is 0 or 1.
``v`` is the recovery id plus the scheme offset.
"""

from __future__ import annotations

from txstamp.constants import RECOVERY_IDS, SIG_COMPONENT_SIZE, SIGNATURE_SIZE
from txstamp.errors import InvalidRecoveryIDError, InvalidSignatureValuesError


def _split(raw_sig: bytes) -> tuple[int, int, int]:
    if not isinstance(raw_sig, (bytes, bytearray)) or len(raw_sig) != SIGNATURE_SIZE:
        size = len(raw_sig) if isinstance(raw_sig, (bytes, bytearray)) else "non-bytes"
        raise InvalidSignatureValuesError(
            f"Signature must be {SIGNATURE_SIZE} bytes, got {size}"
        )
    r = int.from_bytes(raw_sig[0:SIG_COMPONENT_SIZE], "big")
    s = int.from_bytes(raw_sig[SIG_COMPONENT_SIZE:2 * SIG_COMPONENT_SIZE], "big")
    rec_id = raw_sig[64]
    if rec_id not in RECOVERY_IDS:
        raise InvalidRecoveryIDError(f"Raw recovery id must be 0 or 1, got {rec_id}")
    return rec_id, r, s


def _component_bytes(name: str, value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSignatureValuesError(f"{name} must be an integer")
    try:
        return value.to_bytes(SIG_COMPONENT_SIZE, "big")
    except OverflowError as e:
        raise InvalidSignatureValuesError(
            f"{name} does not fit in {SIG_COMPONENT_SIZE} bytes"
        ) from e


def recovery_id(v: int, offset: int) -> int:
    """Strip the scheme offset from ``v``. Raises InvalidRecoveryIDError."""
    if isinstance(v, bool) or not isinstance(v, int):
        raise InvalidRecoveryIDError(f"v must be an integer, got {v!r}")
    rec_id = v - offset
    if rec_id not in RECOVERY_IDS:
        raise InvalidRecoveryIDError(
            f"Invalid recovery id: v={v}, expected {offset} or {offset + 1}"
        )
    return rec_id


def encode(raw_sig: bytes, offset: int) -> tuple[int, int, int]:
    """Split a raw signature into (v, r, s) with ``v = recid + offset``."""
    rec_id, r, s = _split(raw_sig)
    return rec_id + offset, r, s


def decode(v: int, r: int, s: int, offset: int) -> bytes:
    """Rebuild the raw 65-byte signature used for public key recovery."""
    rec_id = recovery_id(v, offset)
    return _component_bytes("r", r) + _component_bytes("s", s) + bytes([rec_id])


def encode_with_offset(raw_sig: bytes, offset: int) -> bytes:
    """Display form: the raw signature with ``v`` as the trailing byte.

    Not usable for recovery.
    """
    v, _, _ = encode(raw_sig, offset)
    return bytes(raw_sig[:2 * SIG_COMPONENT_SIZE]) + bytes([v])


def signature_string(v: int, r: int, s: int, offset: int) -> str:
    """Hex display form of a {v, r, s} signature."""
    return "0x" + encode_with_offset(decode(v, r, s, offset), offset).hex()


def from_hex_signature(sig_hex: str, offset: int) -> tuple[int, int, int]:
    """Parse a 0x-prefixed raw signature and return (v, r, s)."""
    if sig_hex.startswith(("0x", "0X")):
        sig_hex = sig_hex[2:]
    try:
        raw = bytes.fromhex(sig_hex)
    except ValueError as e:
        raise InvalidSignatureValuesError(f"Malformed signature hex: {e}") from e
    return encode(raw, offset)
