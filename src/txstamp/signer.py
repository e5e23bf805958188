"""Signing engine: stamp a record, sign the digest, encode {v, r, s}."""

from __future__ import annotations
import logging

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError as KeyValidationError

from txstamp.codec import encode
from txstamp.config import DEFAULT_SCHEME, SchemeConfig
from txstamp.digest import stamp
from txstamp.errors import SignatureSelfCheckFailedError
from txstamp.keystore import KeyLike, to_private_key
from txstamp.record import Digestible, SignedTx, Tx

logger = logging.getLogger(__name__)


class Signer:
    """Produces scheme-specific signatures for records."""

    def __init__(self, scheme: SchemeConfig = DEFAULT_SCHEME):
        self._scheme = scheme

    @property
    def scheme(self) -> SchemeConfig:
        return self._scheme

    def sign_value(self, value: Digestible, private_key: KeyLike) -> tuple[int, int, int]:
        """Sign any Digestible and return (v, r, s)."""
        pk = to_private_key(private_key)
        digest = stamp(value, self._scheme)
        raw_sig = pk.sign_msg_hash(digest).to_bytes()
        self._self_check(digest, raw_sig, pk.public_key)
        return encode(raw_sig, self._scheme.offset)

    def sign(self, tx: Tx, private_key: KeyLike) -> SignedTx:
        """Sign a Tx and wrap it with its signature."""
        v, r, s = self.sign_value(tx, private_key)
        logger.debug("Signed tx chain=%d nonce=%d from %s (v=%d)",
                     tx.chain_id, tx.nonce, tx.from_id, v)
        return SignedTx(tx=tx, v=v, r=r, s=s)

    @staticmethod
    def _self_check(digest: bytes, raw_sig: bytes, public_key: keys.PublicKey) -> None:
        # Re-read the raw bytes so the check covers exactly what gets encoded.
        try:
            signature = keys.Signature(signature_bytes=raw_sig)
            verified = public_key.verify_msg_hash(digest, signature)
            recovered = signature.recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError) as e:
            raise SignatureSelfCheckFailedError(f"Signature self-check failed: {e}") from e
        if not verified or recovered != public_key:
            raise SignatureSelfCheckFailedError(
                "Signature self-check failed: signature does not verify against signing key"
            )
