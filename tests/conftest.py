"""Shared pytest fixtures for txstamp tests."""

import pytest
from eth_account import Account

from txstamp.record import new_tx


@pytest.fixture
def recipient():
    """A fixed recipient distinct from any generated account."""
    return "0x" + "bb" * 20


@pytest.fixture
def account():
    """Generate a test Ethereum account."""
    return Account.create()


@pytest.fixture
def other_account():
    return Account.create()


@pytest.fixture
def tx(account, recipient):
    """A transfer from ``account`` matching the reference scenario."""
    return new_tx(1, 0, account.address, recipient, 80000, 0, b"hello")


@pytest.fixture
def tmp_key_dir(tmp_path):
    """Temporary directory for key files."""
    d = tmp_path / "keys"
    d.mkdir()
    return d
