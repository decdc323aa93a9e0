"""
Posts component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import Post, User


class SlugConflictError(Exception):
    """Raised by persistence when a slug is already taken at commit time."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Slug '{slug}' already exists")


class PostRepoPort(Protocol):
    """Repository interface for post persistence."""

    def exists_by_slug(self, slug: str) -> bool:
        """Check whether a committed post uses this slug."""
        ...

    def get_by_id(self, post_id: UUID) -> Post | None:
        """Get post by ID."""
        ...

    def list_all(self) -> list[Post]:
        """Fetch every post."""
        ...

    def insert(self, post: Post) -> Post:
        """Insert a new post. Raises SlugConflictError on duplicate slug."""
        ...

    def save(self, post: Post) -> Post:
        """Update an existing post. Raises SlugConflictError on duplicate slug."""
        ...


class UserRepoPort(Protocol):
    """Repository interface for user lookup."""

    def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        ...

    def get_many(self, user_ids: list[UUID]) -> dict[UUID, User]:
        """Get the users that exist among the IDs, keyed by ID."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
