"""Tests for key generation, storage and loading."""

import json
import os
import stat

import pytest
from eth_account import Account
from eth_keys import keys

from txstamp.keystore import (
    address_of,
    generate_key,
    load_key,
    save_key,
    to_private_key,
)


class TestEncryptedFormat:
    def test_document_layout(self, tmp_key_dir):
        key = generate_key()
        path = tmp_key_dir / "enc.json"
        save_key(path, key, passphrase="pw")
        doc = json.loads(path.read_text())
        assert doc["address"] == address_of(key)
        assert doc["encrypted"] is True
        assert set(doc["secret"]) == {"salt", "nonce", "ciphertext"}
        # 32-byte key + 16-byte GCM tag
        assert len(bytes.fromhex(doc["secret"]["ciphertext"])) == 48

    def test_fresh_salt_per_file(self, tmp_key_dir):
        key = generate_key()
        save_key(tmp_key_dir / "a.json", key, passphrase="pw")
        save_key(tmp_key_dir / "b.json", key, passphrase="pw")
        a = json.loads((tmp_key_dir / "a.json").read_text())["secret"]
        b = json.loads((tmp_key_dir / "b.json").read_text())["secret"]
        assert a["salt"] != b["salt"]
        assert a["ciphertext"] != b["ciphertext"]

    def test_wrong_passphrase(self, tmp_key_dir):
        path = tmp_key_dir / "enc.json"
        save_key(path, generate_key(), passphrase="right")
        with pytest.raises(ValueError, match="wrong passphrase"):
            load_key(path, passphrase="wrong")

    def test_missing_secret(self, tmp_key_dir):
        path = tmp_key_dir / "broken.json"
        path.write_text(json.dumps({"address": "0x" + "aa" * 20, "encrypted": True}))
        with pytest.raises(ValueError, match="malformed"):
            load_key(path, passphrase="pw")

    def test_truncated_json(self, tmp_key_dir):
        path = tmp_key_dir / "broken.json"
        path.write_text("{\"encrypted\": tru")
        with pytest.raises(ValueError, match="malformed"):
            load_key(path)

    def test_unencrypted_json(self, tmp_key_dir):
        key = generate_key()
        path = tmp_key_dir / "plain.json"
        path.write_text(json.dumps({"encrypted": False, "secret": key.to_bytes().hex()}))
        assert load_key(path) == key


class TestKeys:
    def test_generate_key(self):
        key = generate_key()
        assert isinstance(key, keys.PrivateKey)
        assert generate_key() != key

    def test_address_of_matches_eth_account(self, account):
        assert address_of(account) == account.address
        assert address_of(bytes(account.key)) == account.address

    def test_to_private_key_passthrough(self):
        key = generate_key()
        assert to_private_key(key) is key

    def test_invalid_hex(self):
        with pytest.raises(ValueError, match="not valid hex"):
            to_private_key("0xnothex")

    def test_wrong_length(self):
        with pytest.raises(ValueError, match="Invalid private key"):
            to_private_key(b"\x01" * 16)


class TestKeyFiles:
    def test_plain_round_trip(self, tmp_key_dir):
        key = generate_key()
        path = tmp_key_dir / "plain.key"
        address = save_key(path, key)
        assert address == address_of(key)
        assert load_key(path) == key

    def test_plain_file_is_hex(self, tmp_key_dir):
        key = generate_key()
        path = tmp_key_dir / "plain.key"
        save_key(path, key)
        assert path.read_text() == key.to_bytes().hex()

    def test_loads_hex_with_prefix_and_newline(self, tmp_key_dir):
        acct = Account.create()
        path = tmp_key_dir / "geth.key"
        path.write_text("0x" + bytes(acct.key).hex() + "\n")
        assert address_of(load_key(path)) == acct.address

    def test_encrypted_round_trip(self, tmp_key_dir):
        key = generate_key()
        path = tmp_key_dir / "enc.json"
        save_key(path, key, passphrase="secret")
        assert key.to_bytes().hex() not in path.read_text()
        assert load_key(path, passphrase="secret") == key

    def test_encrypted_needs_passphrase(self, tmp_key_dir):
        path = tmp_key_dir / "enc.json"
        save_key(path, generate_key(), passphrase="secret")
        with pytest.raises(ValueError, match="passphrase is required"):
            load_key(path)

    def test_file_permissions(self, tmp_key_dir):
        path = tmp_key_dir / "perm.key"
        save_key(path, generate_key())
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_no_overwrite(self, tmp_key_dir):
        path = tmp_key_dir / "dup.key"
        save_key(path, generate_key())
        with pytest.raises(FileExistsError):
            save_key(path, generate_key())

    def test_missing_file(self, tmp_key_dir):
        with pytest.raises(FileNotFoundError):
            load_key(tmp_key_dir / "ghost.key")
