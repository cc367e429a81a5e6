"""
Chocolate Registry

Version: 0.1.0

A registry of user-submitted projects with one review per user per project,
plus challenge-response identity verification over recoverable secp256k1
signatures.

Usage:
    from chocolate import Environment, MemoryStorage, Registry

    env = Environment(alice)
    registry = Registry(MemoryStorage(), env, admin=alice)

    project_id = registry.add_project(meta=b"")
    env.set_caller(bob)
    registry.add_review(project_id, rating=10)

    # Verification: subject asks for a challenge...
    message = registry.initiate_verification()
    # ...signs it off-chain, and an authorizer submits the proof
    env.set_caller(alice)
    registry.finalize_verification(signature, bob)
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from .errors import (
    ErrorCode,
    RegistryError,
    NotFoundError,
    ProjectNotFound,
    ReviewNotFound,
    ConflictError,
    ReviewAlreadyExists,
    NotAuthorized,
    VerificationFlowNotInitiated,
    CryptoError,
    InvalidSignature,
    VerificationFailed,
    ArithmeticOverflow,
    RecoveryError,
)

from .records import AccountRef, Project, Review, ReviewKey, VerifyDetails

from .hashing import blake2_256, wrap_bytes, challenge_digest, account_from_public_key

from .signing import (
    CryptoBackend,
    Secp256k1Backend,
    StaticBackend,
    generate_private_key,
    public_key_for,
    account_for_secret,
    sign_digest,
    sign_challenge,
)

from .storage import Storage, MemoryStorage, SqliteStorage

from .projects import ProjectStore
from .reviews import ReviewLedger
from .authorizers import AuthorizerSet
from .verification import VerificationFlow, build_challenge
from .registry import Environment, Registry


__all__ = [
    "__version__",

    # Errors
    "ErrorCode",
    "RegistryError",
    "NotFoundError",
    "ProjectNotFound",
    "ReviewNotFound",
    "ConflictError",
    "ReviewAlreadyExists",
    "NotAuthorized",
    "VerificationFlowNotInitiated",
    "CryptoError",
    "InvalidSignature",
    "VerificationFailed",
    "ArithmeticOverflow",
    "RecoveryError",

    # Records
    "AccountRef",
    "Project",
    "Review",
    "ReviewKey",
    "VerifyDetails",

    # Hashing
    "blake2_256",
    "wrap_bytes",
    "challenge_digest",
    "account_from_public_key",

    # Signing
    "CryptoBackend",
    "Secp256k1Backend",
    "StaticBackend",
    "generate_private_key",
    "public_key_for",
    "account_for_secret",
    "sign_digest",
    "sign_challenge",

    # Storage
    "Storage",
    "MemoryStorage",
    "SqliteStorage",

    # Components
    "ProjectStore",
    "ReviewLedger",
    "AuthorizerSet",
    "VerificationFlow",
    "build_challenge",
    "Environment",
    "Registry",
]
