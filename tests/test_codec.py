"""Tests for raw signature <-> {v, r, s} conversion."""

import os

import pytest

from txstamp.codec import (
    decode,
    encode,
    encode_with_offset,
    from_hex_signature,
    recovery_id,
    signature_string,
)
from txstamp.errors import InvalidRecoveryIDError, InvalidSignatureValuesError

OFFSET = 29


def _raw(rec_id: int = 0) -> bytes:
    return os.urandom(64) + bytes([rec_id])


class TestEncode:
    def test_splits_components(self):
        raw = b"\x01" * 32 + b"\x02" * 32 + b"\x01"
        v, r, s = encode(raw, OFFSET)
        assert v == 30
        assert r == int.from_bytes(b"\x01" * 32, "big")
        assert s == int.from_bytes(b"\x02" * 32, "big")

    def test_recovery_id_zero(self):
        v, _, _ = encode(_raw(0), OFFSET)
        assert v == 29

    def test_other_offset(self):
        v, _, _ = encode(_raw(1), 27)
        assert v == 28

    def test_bad_recovery_byte(self):
        with pytest.raises(InvalidRecoveryIDError, match="must be 0 or 1"):
            encode(_raw(27), OFFSET)

    def test_wrong_length(self):
        with pytest.raises(InvalidSignatureValuesError, match="65 bytes"):
            encode(b"\x00" * 64, OFFSET)

    def test_non_bytes(self):
        with pytest.raises(InvalidSignatureValuesError):
            encode("00" * 65, OFFSET)


class TestDecode:
    def test_round_trip_raw(self):
        for rec_id in (0, 1):
            raw = _raw(rec_id)
            assert decode(*encode(raw, OFFSET), OFFSET) == raw

    def test_round_trip_vrs(self):
        vrs = (30, 1, 2**256 - 1)
        assert encode(decode(*vrs, OFFSET), OFFSET) == vrs

    def test_left_pads_small_values(self):
        raw = decode(29, 1, 2, OFFSET)
        assert len(raw) == 65
        assert raw[:32] == b"\x00" * 31 + b"\x01"
        assert raw[32:64] == b"\x00" * 31 + b"\x02"
        assert raw[64] == 0

    def test_v_below_offset(self):
        with pytest.raises(InvalidRecoveryIDError):
            decode(28, 1, 1, OFFSET)

    def test_v_above_offset(self):
        with pytest.raises(InvalidRecoveryIDError):
            decode(31, 1, 1, OFFSET)

    def test_raw_recovery_id_rejected_as_v(self):
        with pytest.raises(InvalidRecoveryIDError):
            decode(0, 1, 1, OFFSET)

    def test_r_too_large(self):
        with pytest.raises(InvalidSignatureValuesError, match="r does not fit"):
            decode(29, 2**256, 1, OFFSET)

    def test_s_negative(self):
        with pytest.raises(InvalidSignatureValuesError, match="s does not fit"):
            decode(29, 1, -1, OFFSET)


class TestRecoveryID:
    def test_strips_offset(self):
        assert recovery_id(29, OFFSET) == 0
        assert recovery_id(30, OFFSET) == 1

    def test_non_integer(self):
        with pytest.raises(InvalidRecoveryIDError):
            recovery_id("29", OFFSET)


class TestDisplayForm:
    def test_encode_with_offset_stores_v(self):
        raw = _raw(1)
        shown = encode_with_offset(raw, OFFSET)
        assert shown[:64] == raw[:64]
        assert shown[64] == 30

    def test_signature_string(self):
        s = signature_string(29, 1, 2, OFFSET)
        assert s.startswith("0x")
        assert len(s) == 2 + 130
        assert s.endswith("1d")  # 29

    def test_from_hex_signature(self):
        raw = _raw(1)
        assert from_hex_signature("0x" + raw.hex(), OFFSET) == encode(raw, OFFSET)

    def test_from_hex_without_prefix(self):
        raw = _raw(0)
        assert from_hex_signature(raw.hex(), OFFSET) == encode(raw, OFFSET)

    def test_from_hex_malformed(self):
        with pytest.raises(InvalidSignatureValuesError, match="Malformed"):
            from_hex_signature("0xzz", OFFSET)
