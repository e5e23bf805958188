"""Error kinds raised by the txstamp signing and verification engines.

Every failure is a ``TxStampError`` subclass carrying an ``ErrorKind`` tag,
so callers can either catch a specific class or switch on ``err.kind``.
"""

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ACCOUNT_FORMAT = "InvalidAccountFormat"
    CHAIN_MISMATCH = "ChainMismatch"
    SELF_TRANSFER_REJECTED = "SelfTransferRejected"
    INVALID_SIGNATURE_VALUES = "InvalidSignatureValues"
    INVALID_RECOVERY_ID = "InvalidRecoveryID"
    SIGNER_MISMATCH = "SignerMismatch"
    RECOVERY_FAILED = "RecoveryFailed"
    SIGNATURE_SELF_CHECK_FAILED = "SignatureSelfCheckFailed"
    SERIALIZATION_FAILURE = "SerializationFailure"


class TxStampError(ValueError):
    """Base class for all txstamp failures."""

    kind: ErrorKind

    def __str__(self) -> str:
        msg = super().__str__()
        return msg or self.kind.value


class InvalidAccountFormatError(TxStampError):
    kind = ErrorKind.INVALID_ACCOUNT_FORMAT


class ChainMismatchError(TxStampError):
    kind = ErrorKind.CHAIN_MISMATCH


class SelfTransferRejectedError(TxStampError):
    kind = ErrorKind.SELF_TRANSFER_REJECTED


class InvalidSignatureValuesError(TxStampError):
    kind = ErrorKind.INVALID_SIGNATURE_VALUES


class InvalidRecoveryIDError(TxStampError):
    kind = ErrorKind.INVALID_RECOVERY_ID


class SignerMismatchError(TxStampError):
    kind = ErrorKind.SIGNER_MISMATCH


class RecoveryFailedError(TxStampError):
    kind = ErrorKind.RECOVERY_FAILED


class SignatureSelfCheckFailedError(TxStampError):
    kind = ErrorKind.SIGNATURE_SELF_CHECK_FAILED


class SerializationError(TxStampError):
    kind = ErrorKind.SERIALIZATION_FAILURE
