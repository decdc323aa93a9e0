from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

# --- Enums / Literals ---
RoleType = Literal["administrator", "editor", "author", "contributor", "subscriber"]
VisibilityTier = Literal[
    "administrator", "editor", "author", "contributor", "subscriber", "public", "private"
]
PublicationStatus = Literal["draft", "published"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


ROLES: tuple[RoleType, ...] = ("administrator", "editor", "author", "contributor", "subscriber")
RANKED_TIERS: tuple[VisibilityTier, ...] = (*ROLES, "public")

# --- Users ---


class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    role: RoleType
    first_name: str = ""
    last_name: str = ""
    avatar: str = ""
    is_associate: bool = False
    created_at: datetime = Field(default_factory=_utcnow)


class Requester(BaseModel):
    """Resolved identity of whoever is asking. No user_id means anonymous."""

    user_id: UUID | None = None
    role: RoleType | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @classmethod
    def anonymous(cls) -> "Requester":
        return cls()

    @classmethod
    def for_user(cls, user: User) -> "Requester":
        return cls(user_id=user.id, role=user.role)


# --- Posts ---


class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    body: str = Field(min_length=1)
    status: PublicationStatus = "draft"
    visibility: VisibilityTier = "public"
    author_id: UUID
    published_on: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _published_on_matches_status(self) -> "Post":
        # published implies published_on, draft implies none
        if self.status == "published" and self.published_on is None:
            raise ValueError("published posts require published_on")
        if self.status == "draft" and self.published_on is not None:
            raise ValueError("draft posts cannot carry published_on")
        return self
