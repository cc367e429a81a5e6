"""
Chocolate Registry Errors

Every public operation either returns its value or raises exactly one
RegistryError subclass. Each error carries a stable ErrorCode so hosts can
map failures without matching on exception types.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable failure codes surfaced to callers."""
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"
    REVIEW_ALREADY_EXISTS = "REVIEW_ALREADY_EXISTS"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    VERIFICATION_FLOW_NOT_INITIATED = "VERIFICATION_FLOW_NOT_INITIATED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    ARITHMETIC_OVERFLOW = "ARITHMETIC_OVERFLOW"


class RegistryError(Exception):
    """Base class for all registry failures."""

    code: ErrorCode

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.code.value
        super().__init__(f"{self.code.value}: {self.message}")


class NotFoundError(RegistryError):
    """Queried key does not exist."""


class ProjectNotFound(NotFoundError):
    code = ErrorCode.PROJECT_NOT_FOUND


class ReviewNotFound(NotFoundError):
    code = ErrorCode.REVIEW_NOT_FOUND


class ConflictError(RegistryError):
    """Operation would break a uniqueness invariant."""


class ReviewAlreadyExists(ConflictError):
    code = ErrorCode.REVIEW_ALREADY_EXISTS


class NotAuthorized(RegistryError):
    code = ErrorCode.NOT_AUTHORIZED


class VerificationFlowNotInitiated(RegistryError):
    code = ErrorCode.VERIFICATION_FLOW_NOT_INITIATED


class CryptoError(RegistryError):
    """Signature could not be turned into the expected identity."""


class InvalidSignature(CryptoError):
    """Public key recovery itself failed."""
    code = ErrorCode.INVALID_SIGNATURE


class VerificationFailed(CryptoError):
    """Recovery succeeded but the signer is not the subject account."""
    code = ErrorCode.VERIFICATION_FAILED


class ArithmeticOverflow(RegistryError):
    code = ErrorCode.ARITHMETIC_OVERFLOW


class RecoveryError(Exception):
    """Raised by crypto backends when a public key cannot be recovered."""
