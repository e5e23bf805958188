"""Transfer records and their signed wrapper.

The canonical byte form of a ``Tx`` is compact JSON with keys in the fixed
order ``chain_id, nonce, from, to, value, tip, data``; ``data`` is standard
base64. This layout is part of the signature contract: reordering keys or
changing the encoding produces different digests.
"""

from __future__ import annotations
import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from txstamp.account import AccountID, to_account_id
from txstamp.constants import MAX_UINT16, MAX_UINT64
from txstamp.errors import SerializationError

SIGNATURE_FIELDS = ("v", "r", "s")


class Digestible(Protocol):
    """Anything with a single, deterministic byte form that can be stamped."""

    def canonical_bytes(self) -> bytes:
        ...


def _check_uint(name: str, value, limit: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SerializationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > limit:
        raise SerializationError(f"{name} out of range: {value}")
    return value


def _encode_data(data: Optional[bytes]) -> Optional[str]:
    if data is None:
        return None
    if not isinstance(data, (bytes, bytearray)):
        raise SerializationError(f"data must be bytes, got {type(data).__name__}")
    return base64.b64encode(bytes(data)).decode("ascii")


def _decode_data(raw: Optional[str]) -> Optional[bytes]:
    if raw is None:
        return None
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, TypeError) as e:
        raise SerializationError(f"Invalid base64 data field: {e}") from e


@dataclass(frozen=True)
class Tx:
    """Transfer information between two accounts."""

    chain_id: int
    nonce: int
    from_id: AccountID
    to_id: AccountID
    value: int
    tip: int = 0
    data: Optional[bytes] = b""

    def to_dict(self) -> dict:
        """Field mapping in canonical order, with ``data`` as base64."""
        for name, acct in (("from", self.from_id), ("to", self.to_id)):
            if not isinstance(acct, str):
                raise SerializationError(f"{name} account must be a string")
        return {
            "chain_id": _check_uint("chain_id", self.chain_id, MAX_UINT16),
            "nonce": _check_uint("nonce", self.nonce, MAX_UINT64),
            "from": self.from_id,
            "to": self.to_id,
            "value": _check_uint("value", self.value, MAX_UINT64),
            "tip": _check_uint("tip", self.tip, MAX_UINT64),
            "data": _encode_data(self.data),
        }

    def canonical_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, d: dict) -> Tx:
        """Rebuild a Tx without validating account formats."""
        try:
            return cls(
                chain_id=d["chain_id"],
                nonce=d["nonce"],
                from_id=AccountID(d["from"]),
                to_id=AccountID(d["to"]),
                value=d["value"],
                tip=d["tip"],
                data=_decode_data(d.get("data")),
            )
        except KeyError as e:
            raise SerializationError(f"Missing field: {e.args[0]}") from e


def new_tx(chain_id: int, nonce: int, from_id: str, to_id: str,
           value: int, tip: int = 0, data: Optional[bytes] = b"") -> Tx:
    """Construct a Tx, rejecting malformed from/to accounts.

    Raises InvalidAccountFormatError. Self-transfers are allowed here and
    rejected at validation time.
    """
    return Tx(
        chain_id=chain_id,
        nonce=nonce,
        from_id=to_account_id(from_id),
        to_id=to_account_id(to_id),
        value=value,
        tip=tip,
        data=data,
    )


@dataclass(frozen=True)
class SignedTx:
    """A Tx plus its {v, r, s} signature, as produced by a Signer."""

    tx: Tx
    v: int
    r: int
    s: int

    def to_dict(self) -> dict:
        d = self.tx.to_dict()
        d.update(v=self.v, r=self.r, s=self.s)
        return d

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: dict) -> SignedTx:
        """Rebuild a SignedTx. The embedded Tx is not re-validated."""
        tx = Tx.from_dict(d)
        try:
            v, r, s = (d[k] for k in SIGNATURE_FIELDS)
        except KeyError as e:
            raise SerializationError(f"Missing field: {e.args[0]}") from e
        for name, value in (("v", v), ("r", r), ("s", s)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise SerializationError(f"{name} must be an integer")
        return cls(tx=tx, v=v, r=r, s=s)

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> SignedTx:
        try:
            if isinstance(raw, (bytes, bytearray)):
                raw = bytes(raw).decode("utf-8")
            d = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializationError(f"Invalid signed tx JSON: {e}") from e
        if not isinstance(d, dict):
            raise SerializationError("Signed tx JSON must be an object")
        return cls.from_dict(d)
