"""
Chocolate Registry

The public contract surface. Each call:

1. Takes its caller from the host Environment
2. Runs inside one storage transaction
3. Commits every write on success, or none of them on any error

Components (ProjectStore, ReviewLedger, AuthorizerSet, VerificationFlow)
share the single Storage passed in; there is no module-level state.
"""

import functools
from typing import List, Optional, Tuple

from .authorizers import AuthorizerSet
from .errors import NotAuthorized, RegistryError
from .logging_config import audit_log, set_request_id
from .projects import ProjectStore
from .records import AccountRef, Project, Review, VerifyDetails
from .reviews import ReviewLedger
from .signing import CryptoBackend
from .storage import Storage
from .verification import VerificationFlow


class Environment:
    """
    Host-supplied invocation context.

    Hosts set the caller before each call; tests switch callers the same way.
    """

    def __init__(self, caller: Optional[AccountRef] = None):
        self._caller = caller

    def set_caller(self, caller: AccountRef) -> None:
        self._caller = caller

    def caller(self) -> AccountRef:
        if self._caller is None:
            raise RuntimeError("No caller set in environment")
        return self._caller


def _invocation(method):
    """Run a public operation atomically under a fresh request id."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        set_request_id()
        with self.storage.transaction():
            return method(self, *args, **kwargs)
    return wrapper


class Registry:
    """Project registry, review ledger and identity verification."""

    def __init__(
        self,
        storage: Storage,
        env: Environment,
        crypto: Optional[CryptoBackend] = None,
        admin: Optional[AccountRef] = None
    ):
        self.storage = storage
        self.env = env
        self.admin = admin
        self.projects = ProjectStore(storage)
        self.reviews = ReviewLedger(storage, self.projects)
        self.authorizers = AuthorizerSet(storage)
        self.verification = VerificationFlow(storage, self.authorizers, crypto)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @_invocation
    def add_project(self, meta: bytes = b"", name: bytes = b"") -> int:
        caller = self.env.caller()
        project_id = self.projects.create(caller, meta, name)
        audit_log.project_added(project_id, caller.hex())
        return project_id

    def get_project(self, project_id: int) -> Project:
        return self.projects.get(project_id)

    def list_projects(self) -> List[Tuple[AccountRef, int, Project]]:
        return self.projects.list()

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    @_invocation
    def add_review(self, project_id: int, rating: int, body: bytes = b"") -> None:
        caller = self.env.caller()
        try:
            review = self.reviews.add_review(caller, project_id, rating, body)
        except RegistryError as e:
            audit_log.review_rejected(project_id, caller.hex(), e.code.value)
            raise
        audit_log.review_added(project_id, caller.hex(), review.id, rating)

    def get_review(self, project_id: int, user: AccountRef) -> Review:
        return self.reviews.get_review(project_id, user)

    def reviews_for_project(self, project_id: int) -> List[Review]:
        return self.reviews.reviews_for_project(project_id)

    def reviewers_for_project(self, project_id: int) -> List[AccountRef]:
        return self.reviews.reviewers_for_project(project_id)

    def projects_reviewed_by(self, user: AccountRef) -> List[Tuple[int, Project]]:
        return self.reviews.projects_reviewed_by(user)

    def average_rating(self, project_id: int) -> Optional[float]:
        return self.reviews.average_rating(project_id)

    # ------------------------------------------------------------------
    # Authorizers
    # ------------------------------------------------------------------

    @_invocation
    def add_authorizer(self, account: AccountRef) -> None:
        """
        Appoint an authorizer. With an admin configured, only the admin or
        an existing authorizer may appoint.
        """
        caller = self.env.caller()
        if self.admin is not None and caller != self.admin and not self.authorizers.contains(caller):
            audit_log.security_event("authorizer_appointment_denied", caller=caller.hex(), account=account.hex())
            raise NotAuthorized(f"{caller} may not appoint authorizers")
        if self.authorizers.add(account):
            audit_log.authorizer_added(account.hex(), caller.hex())

    def is_authorizer(self, account: AccountRef) -> bool:
        return self.authorizers.contains(account)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    @_invocation
    def initiate_verification(self) -> bytes:
        caller = self.env.caller()
        reissued = self.verification.pending(caller) is not None
        message = self.verification.initiate(caller)
        details = self.verification.pending(caller)
        audit_log.verification_initiated(caller.hex(), details.index, reissued)
        return message

    @_invocation
    def finalize_verification(self, signature: bytes, address_to_verify: AccountRef) -> None:
        caller = self.env.caller()
        try:
            self.verification.finalize(caller, signature, address_to_verify)
        except RegistryError as e:
            audit_log.verification_rejected(address_to_verify.hex(), caller.hex(), e.code.value)
            raise
        audit_log.verification_finalized(address_to_verify.hex(), caller.hex())

    def pending_verification(self, account: AccountRef) -> Optional[VerifyDetails]:
        return self.verification.pending(account)

    def verified_accounts(self) -> List[AccountRef]:
        return self.verification.verified_accounts()

    def is_verified(self, account: AccountRef) -> bool:
        return self.verification.is_verified(account)
