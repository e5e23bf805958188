"""Verification engine for signed transfer records.

``Verifier.validate`` is a strict sequential gate; the first failing check
determines the error:

1. chain id matches, else ChainMismatchError
2. from/to are well-formed, else InvalidAccountFormatError
3. from != to, else SelfTransferRejectedError
4. v, r, s in range (low-s), else InvalidSignatureValuesError
5. recovered signer == from, else SignerMismatchError
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError as KeyValidationError

from txstamp.account import AccountID, is_account_id, same_account
from txstamp.codec import decode, recovery_id
from txstamp.config import DEFAULT_SCHEME, SchemeConfig
from txstamp.constants import (
    DIGEST_SIZE,
    SECP256K1_HALF_N,
    SECP256K1_N,
    SIGNATURE_SIZE,
)
from txstamp.digest import stamp
from txstamp.errors import (
    ChainMismatchError,
    InvalidAccountFormatError,
    InvalidRecoveryIDError,
    InvalidSignatureValuesError,
    RecoveryFailedError,
    SelfTransferRejectedError,
    SignerMismatchError,
    TxStampError,
)
from txstamp.record import Digestible, SignedTx

logger = logging.getLogger(__name__)


def recover_address(digest: bytes, raw_sig: bytes) -> AccountID:
    """Recover the checksummed signer address from a digest and raw signature.

    Raises RecoveryFailedError on malformed input.
    """
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_SIZE:
        raise RecoveryFailedError(f"Digest must be {DIGEST_SIZE} bytes")
    if not isinstance(raw_sig, (bytes, bytearray)) or len(raw_sig) != SIGNATURE_SIZE:
        raise RecoveryFailedError(f"Signature must be {SIGNATURE_SIZE} bytes")
    try:
        signature = keys.Signature(signature_bytes=bytes(raw_sig))
        public_key = signature.recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, KeyValidationError, TypeError, ValueError) as e:
        raise RecoveryFailedError(f"Unable to recover public key: {e}") from e
    return AccountID(public_key.to_checksum_address())


class Verifier:
    """Checks signed records under one signing scheme."""

    def __init__(self, scheme: SchemeConfig = DEFAULT_SCHEME):
        self._scheme = scheme

    @property
    def scheme(self) -> SchemeConfig:
        return self._scheme

    def check_signature_values(self, v: int, r: int, s: int) -> None:
        try:
            recovery_id(v, self._scheme.offset)
        except InvalidRecoveryIDError as e:
            raise InvalidSignatureValuesError(str(e)) from e
        for name, value in (("r", r), ("s", s)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidSignatureValuesError(f"{name} must be an integer")
        if not 1 <= r < SECP256K1_N:
            raise InvalidSignatureValuesError("r out of range")
        if not 1 <= s <= SECP256K1_HALF_N:
            raise InvalidSignatureValuesError("s out of range (must be nonzero and low-s)")

    def from_address(self, value: Digestible, v: int, r: int, s: int) -> AccountID:
        """Address of the key that signed ``value`` with (v, r, s)."""
        digest = stamp(value, self._scheme)
        raw_sig = decode(v, r, s, self._scheme.offset)
        return recover_address(digest, raw_sig)

    def validate(self, signed: SignedTx, chain_id: int) -> None:
        """Raise the first TxStampError found, or return None if valid."""
        tx = signed.tx
        if tx.chain_id != chain_id:
            raise ChainMismatchError(
                f"invalid chain id, got[{tx.chain_id}], expected[{chain_id}]"
            )

        if not is_account_id(tx.from_id):
            raise InvalidAccountFormatError("from account is not properly formatted")
        if not is_account_id(tx.to_id):
            raise InvalidAccountFormatError("to account is not properly formatted")

        if same_account(tx.from_id, tx.to_id):
            raise SelfTransferRejectedError(
                f"transaction invalid, sending money to yourself, from {tx.from_id}, to {tx.to_id}"
            )

        self.check_signature_values(signed.v, signed.r, signed.s)

        address = self.from_address(tx, signed.v, signed.r, signed.s)
        if not same_account(address, tx.from_id):
            raise SignerMismatchError(
                f"signature address {address} doesn't match from address {tx.from_id}"
            )

    def check(self, signed: SignedTx, chain_id: int) -> Optional[TxStampError]:
        """Like validate(), but return the error instead of raising it."""
        try:
            self.validate(signed, chain_id)
        except TxStampError as e:
            logger.debug("Rejected signed tx from %s: %s: %s",
                         signed.tx.from_id, e.kind.value, e)
            return e
        return None

    def is_valid(self, signed: SignedTx, chain_id: int) -> bool:
        return self.check(signed, chain_id) is None

    def validate_batch(self, signed_txs: Iterable[SignedTx],
                       chain_id: int) -> list[Optional[TxStampError]]:
        """Check each record independently; results follow input order."""
        return [self.check(signed, chain_id) for signed in signed_txs]
