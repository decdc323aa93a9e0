"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from src.domain.entities import Post, PublicationStatus, VisibilityTier

ErrorKind = Literal["unauthenticated", "forbidden", "invalid_request", "conflict", "not_found"]

# --- Errors ---


@dataclass(frozen=True)
class PostError:
    """Structured failure handed back to the transport layer."""

    kind: ErrorKind
    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreatePostInput:
    """Already parsed payload for a new post."""

    title: str
    body: str
    slug: str | None = None
    status: PublicationStatus | None = None
    visibility: VisibilityTier | None = None


@dataclass(frozen=True)
class UpdatePostInput:
    """Partial update. None leaves the field untouched; visibility is fixed at creation."""

    title: str | None = None
    body: str | None = None
    slug: str | None = None
    status: PublicationStatus | None = None


# --- Output Models ---


@dataclass(frozen=True)
class PostOperationOutput:
    """Output for create and update."""

    post: Post | None = None
    errors: list[PostError] = field(default_factory=list)
    success: bool = True

    @property
    def error(self) -> PostError | None:
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class PostListOutput:
    """Output for listings. An empty list is still a success."""

    items: list[Post]
    total: int
    errors: list[PostError] = field(default_factory=list)
    success: bool = True
