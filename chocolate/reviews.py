"""
Chocolate Review Ledger

One review per (owner, project) pair.

The ledger keeps every ReviewKey in a single sequence sorted by
(owner, project_id); membership is a binary search over it. Reviews are
stored under their ReviewKey and carry an immutable id drawn from the
review_index counter, so inserting a key never moves an existing review.
"""

from bisect import bisect_left
from typing import List, Optional, Tuple

from .encoding import U32_MAX, checked_add_u32
from .errors import ArithmeticOverflow, ReviewAlreadyExists, ReviewNotFound
from .projects import ProjectStore
from .records import AccountRef, Project, Review, ReviewKey
from .storage import Storage

REVIEW_KEYS_KEY = "review_keys"
REVIEW_INDEX_KEY = "review_index"


def _review_key(key: ReviewKey) -> str:
    return f"review:{key.owner.hex()}:{key.project_id}"


class ReviewLedger:
    """Deduplicated reviews and the aggregates they feed."""

    def __init__(self, storage: Storage, projects: ProjectStore):
        self.storage = storage
        self.projects = projects

    def review_keys(self) -> List[ReviewKey]:
        """The sorted ReviewKey sequence."""
        raw = self.storage.get(REVIEW_KEYS_KEY) or []
        return [ReviewKey.from_list(item) for item in raw]

    def _search(self, keys: List[ReviewKey], key: ReviewKey) -> Tuple[bool, int]:
        """Binary search; returns (found, position or insertion point)."""
        position = bisect_left(keys, key)
        found = position < len(keys) and keys[position] == key
        return found, position

    def add_review(
        self,
        caller: AccountRef,
        project_id: int,
        rating: int,
        body: bytes = b""
    ) -> Review:
        """
        Record caller's review of a project.

        Raises:
            ProjectNotFound: no project with that id
            ReviewAlreadyExists: caller already reviewed the project
            ArithmeticOverflow: rating or an aggregate leaves the u32 range
        """
        if rating < 0 or rating > U32_MAX:
            raise ArithmeticOverflow(f"rating out of u32 range: {rating}")

        project = self.projects.get(project_id)

        key = ReviewKey(caller, project_id)
        keys = self.review_keys()
        found, position = self._search(keys, key)
        if found:
            raise ReviewAlreadyExists(
                f"{caller} already reviewed project {project_id}"
            )

        # All fallible arithmetic happens before the first write.
        review_id = self.storage.get(REVIEW_INDEX_KEY) or 0
        next_review_id = checked_add_u32(review_id, 1)
        updated = self.projects.with_rating(project, rating)

        review = Review(id=review_id, rating=rating, owner=caller, body=bytes(body))
        keys.insert(position, key)

        self.storage.insert(REVIEW_KEYS_KEY, [k.to_list() for k in keys])
        self.storage.insert(REVIEW_INDEX_KEY, next_review_id)
        self.storage.insert(_review_key(key), review.to_dict())
        self.projects.save_aggregates(project_id, updated)
        return review

    def has_review(self, project_id: int, user: AccountRef) -> bool:
        found, _ = self._search(self.review_keys(), ReviewKey(user, project_id))
        return found

    def get_review(self, project_id: int, user: AccountRef) -> Review:
        key = ReviewKey(user, project_id)
        found, _ = self._search(self.review_keys(), key)
        if not found:
            raise ReviewNotFound(f"{user} has not reviewed project {project_id}")
        return self._load(key)

    def _load(self, key: ReviewKey) -> Review:
        data = self.storage.get(_review_key(key))
        if data is None:
            raise ReviewNotFound(f"missing review record for {key.owner} on {key.project_id}")
        return Review.from_dict(data)

    def reviews_for_project(self, project_id: int) -> List[Review]:
        return [self._load(k) for k in self.review_keys() if k.project_id == project_id]

    def reviewers_for_project(self, project_id: int) -> List[AccountRef]:
        return [k.owner for k in self.review_keys() if k.project_id == project_id]

    def projects_reviewed_by(self, user: AccountRef) -> List[Tuple[int, Project]]:
        return [
            (k.project_id, self.projects.get(k.project_id))
            for k in self.review_keys()
            if k.owner == user
        ]

    def average_rating(self, project_id: int) -> Optional[float]:
        """Mean rating, or None when the project has no reviews."""
        project = self.projects.get(project_id)
        if project.review_count == 0:
            return None
        return project.rating_sum / project.review_count
