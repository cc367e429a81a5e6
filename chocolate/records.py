"""
Chocolate Registry Records

Value types shared by every component: the opaque account handle, the
project and review records, and pending verification details.

Records serialize to plain JSON-compatible dicts (bytes as hex) so any
Storage backend can persist them.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from .encoding import U32_MAX

ACCOUNT_LENGTH = 32


@dataclass(frozen=True, order=True)
class AccountRef:
    """
    Opaque 32-byte account identifier.

    Totally ordered by its raw bytes, which is the order the review index
    and the authorizer set are sorted by.
    """
    raw: bytes

    def __post_init__(self):
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError("AccountRef requires bytes")
        if len(self.raw) != ACCOUNT_LENGTH:
            raise ValueError(f"AccountRef must be {ACCOUNT_LENGTH} bytes, got {len(self.raw)}")
        object.__setattr__(self, "raw", bytes(self.raw))

    def encode(self) -> bytes:
        """Fixed-width serialization used in challenge messages."""
        return self.raw

    def hex(self) -> str:
        return self.raw.hex()

    @classmethod
    def from_hex(cls, value: str) -> "AccountRef":
        if value.startswith("0x"):
            value = value[2:]
        return cls(bytes.fromhex(value))

    def __str__(self) -> str:
        return f"0x{self.raw.hex()}"

    def __repr__(self) -> str:
        return f"AccountRef(0x{self.raw.hex()[:8]}...)"


class ReviewKey(NamedTuple):
    """(owner, project_id) pair; tuple order is the review index order."""
    owner: AccountRef
    project_id: int

    def to_list(self) -> List[Any]:
        return [self.owner.hex(), self.project_id]

    @classmethod
    def from_list(cls, data: List[Any]) -> "ReviewKey":
        return cls(AccountRef.from_hex(data[0]), int(data[1]))


class _Record(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


class Project(_Record):
    review_count: int = Field(default=0, ge=0, le=U32_MAX)
    rating_sum: int = Field(default=0, ge=0, le=U32_MAX)
    owner: AccountRef
    meta: bytes = b""
    name: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "review_count": self.review_count,
            "rating_sum": self.rating_sum,
            "owner": self.owner.hex(),
            "meta": self.meta.hex(),
            "name": self.name.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            review_count=data["review_count"],
            rating_sum=data["rating_sum"],
            owner=AccountRef.from_hex(data["owner"]),
            meta=bytes.fromhex(data.get("meta", "")),
            name=bytes.fromhex(data.get("name", "")),
        )


class Review(_Record):
    id: int = Field(ge=0, le=U32_MAX)
    rating: int = Field(ge=0, le=U32_MAX)
    owner: AccountRef
    body: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rating": self.rating,
            "owner": self.owner.hex(),
            "body": self.body.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            id=data["id"],
            rating=data["rating"],
            owner=AccountRef.from_hex(data["owner"]),
            body=bytes.fromhex(data.get("body", "")),
        )


class VerifyDetails(_Record):
    """Pending challenge for one account."""
    index: int = Field(ge=0, le=U32_MAX)
    message: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "message": self.message.hex()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerifyDetails":
        return cls(index=data["index"], message=bytes.fromhex(data["message"]))
