"""Domain-separated Keccak-256 digest ("stamp") of a canonical record."""

from __future__ import annotations

from web3 import Web3

from txstamp.config import DEFAULT_SCHEME, SchemeConfig
from txstamp.constants import STAMP_MAGIC, STAMP_SUFFIX
from txstamp.record import Digestible


def stamp_prefix(scheme: SchemeConfig, length: int) -> bytes:
    """Build ``\\x19<name> Signed Message:\\n<length>``."""
    return STAMP_MAGIC + f"{scheme.name}{STAMP_SUFFIX}{length}".encode("utf-8")


def stamp(value: Digestible, scheme: SchemeConfig = DEFAULT_SCHEME) -> bytes:
    """Return the 32-byte digest that gets signed for ``value``.

    The advertised length is taken from the same serialized bytes that are
    hashed.
    """
    data = value.canonical_bytes()
    return bytes(Web3.keccak(stamp_prefix(scheme, len(data)) + data))
