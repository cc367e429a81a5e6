"""
Chocolate Identity Verification Flow

Binds an account to an externally held secp256k1 key via challenge and
response.

State per account is the presence or absence of a VerifyDetails entry:

    NoFlow --initiate--> PendingVerification --finalize(ok)--> NoFlow

1. The subject calls initiate() and receives a challenge message:
       encode(account) ++ u32_be(verifications_count)
   Re-initiating while pending returns the same message and allocates
   nothing.
2. The identity holder signs H("<Bytes>" ++ message ++ "</Bytes>").
3. An authorizer (never required to be the subject) submits the signature.
   The recovered key must hash to the subject account.

A wrong signer or an unrecoverable signature leaves the pending challenge
in place so a corrected signature can be submitted.
"""

from typing import List, Optional

from .authorizers import AuthorizerSet
from .encoding import checked_add_u32, u32_be
from .errors import (
    InvalidSignature,
    NotAuthorized,
    RecoveryError,
    VerificationFailed,
    VerificationFlowNotInitiated,
)
from .hashing import wrap_bytes
from .records import AccountRef, VerifyDetails
from .signing import CryptoBackend, Secp256k1Backend
from .storage import Storage

VERIFICATIONS_COUNT_KEY = "verifications_count"
VERIFIED_ACCOUNTS_KEY = "verified_accounts"


def _details_key(account: AccountRef) -> str:
    return f"verify:{account.hex()}"


def build_challenge(account: AccountRef, index: int) -> bytes:
    """Challenge message for an account at a given verification index."""
    return account.encode() + u32_be(index)


class VerificationFlow:
    """Challenge issuance and signature validation."""

    def __init__(
        self,
        storage: Storage,
        authorizers: AuthorizerSet,
        crypto: Optional[CryptoBackend] = None
    ):
        self.storage = storage
        self.authorizers = authorizers
        self.crypto = crypto or Secp256k1Backend()

    @property
    def verifications_count(self) -> int:
        """Total flows ever issued."""
        return self.storage.get(VERIFICATIONS_COUNT_KEY) or 0

    def pending(self, account: AccountRef) -> Optional[VerifyDetails]:
        data = self.storage.get(_details_key(account))
        return VerifyDetails.from_dict(data) if data is not None else None

    def initiate(self, caller: AccountRef) -> bytes:
        """Issue (or re-issue) the challenge caller must sign."""
        existing = self.pending(caller)
        if existing is not None:
            return existing.message

        index = checked_add_u32(self.verifications_count, 1)
        details = VerifyDetails(index=index, message=build_challenge(caller, index))
        self.storage.insert(VERIFICATIONS_COUNT_KEY, index)
        self.storage.insert(_details_key(caller), details.to_dict())
        return details.message

    def digest_for(self, message: bytes) -> bytes:
        return self.crypto.hash(wrap_bytes(message))

    def finalize(
        self,
        caller: AccountRef,
        signature: bytes,
        address_to_verify: AccountRef
    ) -> None:
        """
        Complete a pending flow for address_to_verify.

        Raises:
            NotAuthorized: caller is not an authorizer
            VerificationFlowNotInitiated: no pending challenge for the subject
            InvalidSignature: the public key could not be recovered
            VerificationFailed: the signature belongs to another account
        """
        if not self.authorizers.contains(caller):
            raise NotAuthorized(f"{caller} may not finalize verifications")

        details = self.pending(address_to_verify)
        if details is None:
            raise VerificationFlowNotInitiated(
                f"no pending verification for {address_to_verify}"
            )

        digest = self.digest_for(details.message)
        try:
            public_key = self.crypto.ecdsa_recover(bytes(signature), digest)
        except RecoveryError as e:
            raise InvalidSignature(f"could not recover signer: {e}") from e

        recovered = AccountRef(self.crypto.hash(public_key))
        if recovered != address_to_verify:
            raise VerificationFailed(
                f"signature is from {recovered}, expected {address_to_verify}"
            )

        verified = self.storage.get(VERIFIED_ACCOUNTS_KEY) or []
        verified.append(address_to_verify.hex())
        self.storage.remove(_details_key(address_to_verify))
        self.storage.insert(VERIFIED_ACCOUNTS_KEY, verified)

    def verified_accounts(self) -> List[AccountRef]:
        """Append-only log of completed verifications, duplicates kept."""
        return [AccountRef.from_hex(h) for h in self.storage.get(VERIFIED_ACCOUNTS_KEY) or []]

    def is_verified(self, account: AccountRef) -> bool:
        return account.hex() in (self.storage.get(VERIFIED_ACCOUNTS_KEY) or [])
