"""
Chocolate Registry Cryptographic Signing

Recoverable ECDSA over secp256k1, backed by coincurve.

The registry only ever recovers keys. Signing helpers exist for the
identity holder side (CLI, tests, relays).

Signatures are 65 bytes: r (32) || s (32) || recovery id (1). A recovery
id of 27..30 is accepted and normalised to 0..3.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from coincurve import PrivateKey, PublicKey

from .errors import RecoveryError
from .hashing import account_from_public_key, blake2_256, challenge_digest
from .records import AccountRef

SIGNATURE_LENGTH = 65
DIGEST_LENGTH = 32


class CryptoBackend(ABC):
    """Hash and public-key recovery primitives supplied by the host."""

    def hash(self, data: bytes) -> bytes:
        return blake2_256(data)

    @abstractmethod
    def ecdsa_recover(self, signature: bytes, digest: bytes) -> bytes:
        """
        Recover the signer's public key.

        Raises:
            RecoveryError: signature is malformed or unrecoverable
        """
        pass


class Secp256k1Backend(CryptoBackend):
    """coincurve-backed recovery returning 33-byte compressed keys."""

    def ecdsa_recover(self, signature: bytes, digest: bytes) -> bytes:
        if len(signature) != SIGNATURE_LENGTH:
            raise RecoveryError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}")
        if len(digest) != DIGEST_LENGTH:
            raise RecoveryError(f"digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")

        recovery_id = signature[64]
        if recovery_id > 26:
            recovery_id -= 27
        if recovery_id > 3:
            raise RecoveryError(f"invalid recovery id: {signature[64]}")

        normalised = bytes(signature[:64]) + bytes([recovery_id])
        try:
            public_key = PublicKey.from_signature_and_message(normalised, bytes(digest), hasher=None)
        except (ValueError, TypeError) as e:
            raise RecoveryError(str(e)) from e
        return public_key.format(compressed=True)


class StaticBackend(CryptoBackend):
    """
    Backend driven by a plain function, for hosts that already expose
    recovery and for deterministic tests.
    """

    def __init__(
        self,
        recover: Callable[[bytes, bytes], bytes],
        hasher: Optional[Callable[[bytes], bytes]] = None
    ):
        self._recover = recover
        self._hasher = hasher

    def hash(self, data: bytes) -> bytes:
        if self._hasher is not None:
            return self._hasher(data)
        return super().hash(data)

    def ecdsa_recover(self, signature: bytes, digest: bytes) -> bytes:
        return self._recover(signature, digest)


# Convenience functions

def generate_private_key() -> bytes:
    """Generate a random 32-byte secp256k1 secret."""
    return PrivateKey().secret


def public_key_for(secret: bytes) -> bytes:
    """Compressed public key for a secret."""
    return PrivateKey(secret).public_key.format(compressed=True)


def account_for_secret(secret: bytes) -> AccountRef:
    """Account id controlled by a secret."""
    return account_from_public_key(public_key_for(secret))


def sign_digest(secret: bytes, digest: bytes) -> bytes:
    """Produce a 65-byte recoverable signature over a 32-byte digest."""
    if len(digest) != DIGEST_LENGTH:
        raise ValueError(f"digest must be {DIGEST_LENGTH} bytes")
    return PrivateKey(secret).sign_recoverable(digest, hasher=None)


def sign_challenge(secret: bytes, message: bytes) -> bytes:
    """Wrap, hash and sign a challenge message."""
    return sign_digest(secret, challenge_digest(message))
