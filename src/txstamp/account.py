"""Account identifiers: 0x-prefixed, 20-byte hex addresses."""

from __future__ import annotations
from typing import NewType

from web3 import Web3

from txstamp.constants import ADDRESS_HEX_LENGTH
from txstamp.errors import InvalidAccountFormatError

AccountID = NewType("AccountID", str)

_HEX_CHARS = frozenset("0123456789abcdefABCDEF")


def _has_0x_prefix(s: str) -> bool:
    return len(s) >= 2 and s[0] == "0" and s[1] in ("x", "X")


def _is_hex(s: str) -> bool:
    if len(s) % 2 != 0:
        return False
    return all(c in _HEX_CHARS for c in s)


def is_account_id(s) -> bool:
    """Return True if ``s`` is an optionally 0x-prefixed 40-hex-char address."""
    if not isinstance(s, str):
        return False
    if _has_0x_prefix(s):
        s = s[2:]
    return len(s) == ADDRESS_HEX_LENGTH and _is_hex(s)


def to_account_id(s: str) -> AccountID:
    """Validate ``s`` and return it as an AccountID.

    Raises InvalidAccountFormatError if the string is not a valid account.
    """
    if not is_account_id(s):
        raise InvalidAccountFormatError(f"Invalid account format: {s!r}")
    return AccountID(s)


def same_account(a: str, b: str) -> bool:
    """Compare two account ids ignoring prefix and hex letter case."""
    return _strip(a).lower() == _strip(b).lower()


def to_checksum(account: str) -> AccountID:
    """Return the EIP-55 checksummed form of a valid account id."""
    account = to_account_id(account)
    return AccountID(Web3.to_checksum_address("0x" + _strip(account)))


def _strip(s: str) -> str:
    return s[2:] if _has_0x_prefix(s) else s
