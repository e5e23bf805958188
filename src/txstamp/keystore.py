"""secp256k1 private key generation, loading and storage.

A key file is either plain hex (64 hex characters, optional 0x prefix) or
a JSON document holding the key encrypted with AES-256-GCM under a
PBKDF2-derived passphrase key.
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from eth_account import Account
from eth_keys import keys
from eth_utils import ValidationError as KeyValidationError

from txstamp.account import AccountID
from txstamp.constants import DEFAULT_KEY_FILE_MODE

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 480_000
SALT_SIZE = 16
NONCE_SIZE = 12
KEY_SIZE = 32

KeyLike = Union[keys.PrivateKey, bytes, str]


def _derive_key(passphrase: str, salt: bytes) -> bytes:
    """Derive a 256-bit AES key from a passphrase using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def _encrypt_secret(secret_bytes: bytes, passphrase: str) -> dict:
    """Encrypt secret key bytes with AES-256-GCM."""
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    aesgcm = AESGCM(_derive_key(passphrase, salt))
    ciphertext = aesgcm.encrypt(nonce, secret_bytes, None)
    return {
        "salt": salt.hex(),
        "nonce": nonce.hex(),
        "ciphertext": ciphertext.hex(),
    }


def _decrypt_secret(enc_data: dict, passphrase: str) -> bytes:
    """Decrypt secret key bytes from AES-256-GCM."""
    salt = bytes.fromhex(enc_data["salt"])
    nonce = bytes.fromhex(enc_data["nonce"])
    ciphertext = bytes.fromhex(enc_data["ciphertext"])
    aesgcm = AESGCM(_derive_key(passphrase, salt))
    return aesgcm.decrypt(nonce, ciphertext, None)


def to_private_key(key: KeyLike) -> keys.PrivateKey:
    """Coerce a PrivateKey, LocalAccount, 32 raw bytes or hex string."""
    if isinstance(key, keys.PrivateKey):
        return key
    if hasattr(key, "key"):
        key = key.key
    if isinstance(key, str):
        text = key.strip()
        if text.startswith(("0x", "0X")):
            text = text[2:]
        try:
            key = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Private key is not valid hex: {e}") from e
    try:
        return keys.PrivateKey(bytes(key))
    except KeyValidationError as e:
        raise ValueError(f"Invalid private key: {e}") from e


def address_of(key: KeyLike) -> AccountID:
    """Checksummed account id controlled by ``key``."""
    return AccountID(to_private_key(key).public_key.to_checksum_address())


def generate_key() -> keys.PrivateKey:
    """Generate a fresh random secp256k1 private key."""
    acct = Account.create()
    return keys.PrivateKey(bytes(acct.key))


def save_key(path: Path, key: KeyLike, passphrase: Optional[str] = None) -> AccountID:
    """Write ``key`` to ``path`` with mode 0600 and return its address.

    The key is stored encrypted when a passphrase is given, as plain hex
    otherwise. Never overwrites an existing file.
    """
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Key file '{path}' already exists")

    private_key = to_private_key(key)
    address = address_of(private_key)
    if passphrase:
        content = json.dumps({
            "address": address,
            "encrypted": True,
            "secret": _encrypt_secret(private_key.to_bytes(), passphrase),
        }, indent=2)
    else:
        logger.warning("Writing unencrypted key file %s", path)
        content = private_key.to_bytes().hex()

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, DEFAULT_KEY_FILE_MODE)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    logger.info("Saved key for %s to %s", address, path)
    return address


def load_key(path: Path, passphrase: Optional[str] = None) -> keys.PrivateKey:
    """Load a private key from a plain hex or encrypted JSON key file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Key file '{path}' not found")

    text = path.read_text().strip()
    if not text.startswith("{"):
        return to_private_key(text)

    try:
        data = json.loads(text)
        secret = data["secret"]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ValueError(f"Key file '{path}' is malformed: {e!r}") from e
    if not data.get("encrypted"):
        return to_private_key(secret)
    if not passphrase:
        raise ValueError(f"Key file '{path}' is encrypted; a passphrase is required")
    try:
        secret_bytes = _decrypt_secret(secret, passphrase)
    except InvalidTag as e:
        raise ValueError(f"Failed to decrypt key file '{path}': wrong passphrase") from e
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Key file '{path}' is malformed: {e!r}") from e
    if len(secret_bytes) != KEY_SIZE:
        raise ValueError(f"Decrypted key has wrong size: {len(secret_bytes)}")
    return keys.PrivateKey(secret_bytes)
