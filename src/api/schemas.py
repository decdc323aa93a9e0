from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# --- Shared Enums/Types ---
Role = Literal["administrator", "editor", "author", "contributor", "subscriber"]
PublicationStatus = Literal["draft", "published"]
Visibility = Literal[
    "administrator", "editor", "author", "contributor", "subscriber", "public", "private"
]


# --- Posts ---
class PostCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    slug: str | None = None
    status: PublicationStatus | None = None
    visibility: Visibility | None = None


class PostUpdateRequest(BaseModel):
    # visibility and author are fixed once a post exists
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    body: str | None = Field(default=None, min_length=1)
    slug: str | None = None
    status: PublicationStatus | None = None


class AuthorResponse(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    avatar: str
    role: Role
    is_associate: bool


class PostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    body: str
    status: PublicationStatus
    visibility: Visibility
    published_on: datetime | None = None
    author: AuthorResponse | None = None
