import pytest

from chocolate import (
    AccountRef,
    Environment,
    MemoryStorage,
    Registry,
    RecoveryError,
    StaticBackend,
    account_for_secret,
    blake2_256,
)


def secret_for(n: int) -> bytes:
    """Deterministic, valid secp256k1 secret."""
    return (n + 1000).to_bytes(32, "big")


class Accounts:
    """Named test accounts, each controlled by a known secret."""

    def __init__(self):
        self.secrets = {name: secret_for(i) for i, name in enumerate(
            ["alice", "bob", "charlie", "dave", "eve"]
        )}
        for name, secret in self.secrets.items():
            setattr(self, name, account_for_secret(secret))


def stub_recover(signature: bytes, digest: bytes) -> bytes:
    """First 33 signature bytes act as the public key; 0xff marks garbage."""
    if len(signature) != 65 or signature[0] == 0xFF:
        raise RecoveryError("stub: unrecoverable")
    return signature[:33]


def stub_signature(public_key: bytes) -> bytes:
    return public_key + b"\x00" * (65 - len(public_key))


def stub_account(public_key: bytes) -> AccountRef:
    return AccountRef(blake2_256(public_key))


@pytest.fixture
def accounts():
    return Accounts()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def env(accounts):
    return Environment(accounts.alice)


@pytest.fixture
def registry(storage, env, accounts):
    return Registry(storage, env, admin=accounts.alice)


@pytest.fixture
def stub_backend():
    return StaticBackend(stub_recover)
