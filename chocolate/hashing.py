"""
Chocolate Registry Hashing

All identity hashes use BLAKE2b with a 32-byte digest, the host's 256-bit
hash. Signed challenges are framed with <Bytes>...</Bytes> before hashing,
matching the raw-bytes convention used by wallet signers.
"""

import hashlib
from typing import Union

from .records import AccountRef

BYTES_PREFIX = b"<Bytes>"
BYTES_SUFFIX = b"</Bytes>"


def blake2_256(data: Union[bytes, str]) -> bytes:
    """Compute the 32-byte BLAKE2b digest."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.blake2b(data, digest_size=32).digest()


def wrap_bytes(message: bytes) -> bytes:
    """Frame a message the way wallet signers do for raw byte payloads."""
    return BYTES_PREFIX + bytes(message) + BYTES_SUFFIX


def challenge_digest(message: bytes) -> bytes:
    """Digest an identity holder signs for a challenge message."""
    return blake2_256(wrap_bytes(message))


def account_from_public_key(public_key: bytes) -> AccountRef:
    """Derive the account id the host assigns to a public key."""
    return AccountRef(blake2_256(public_key))
