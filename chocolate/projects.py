"""
Chocolate Project Store

Owns Project records keyed by a dense, 0-based id. Ids are allocated from
the project_index counter, never reused, and projects are never deleted,
so every id below the counter resolves.
"""

from typing import List, Tuple

from .encoding import checked_add_u32
from .errors import ProjectNotFound
from .records import AccountRef, Project
from .storage import Storage

PROJECT_INDEX_KEY = "project_index"


def _project_key(project_id: int) -> str:
    return f"project:{project_id}"


class ProjectStore:
    """Project records plus the next-id counter."""

    def __init__(self, storage: Storage):
        self.storage = storage

    @property
    def project_index(self) -> int:
        """Id the next created project will receive."""
        return self.storage.get(PROJECT_INDEX_KEY) or 0

    def create(self, owner: AccountRef, meta: bytes = b"", name: bytes = b"") -> int:
        project_id = self.project_index
        next_index = checked_add_u32(project_id, 1)
        project = Project(owner=owner, meta=bytes(meta), name=bytes(name))
        self.storage.insert(_project_key(project_id), project.to_dict())
        self.storage.insert(PROJECT_INDEX_KEY, next_index)
        return project_id

    def get(self, project_id: int) -> Project:
        data = self.storage.get(_project_key(project_id))
        if data is None:
            raise ProjectNotFound(f"project {project_id} does not exist")
        return Project.from_dict(data)

    def exists(self, project_id: int) -> bool:
        return self.storage.contains(_project_key(project_id))

    def list(self) -> List[Tuple[AccountRef, int, Project]]:
        """All projects in id order as (owner, id, project)."""
        result = []
        for project_id in range(self.project_index):
            project = self.get(project_id)
            result.append((project.owner, project_id, project))
        return result

    def with_rating(self, project: Project, rating: int) -> Project:
        """
        Project with one more review of the given rating folded into its
        aggregates. Raises ArithmeticOverflow, leaving nothing written.
        """
        return project.model_copy(update={
            "review_count": checked_add_u32(project.review_count, 1),
            "rating_sum": checked_add_u32(project.rating_sum, rating),
        })

    def save_aggregates(self, project_id: int, project: Project) -> None:
        """Persist aggregate changes computed by with_rating."""
        if not self.exists(project_id):
            raise ProjectNotFound(f"project {project_id} does not exist")
        self.storage.insert(_project_key(project_id), project.to_dict())
