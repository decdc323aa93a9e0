"""
Slugs component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class SlugExistsPort(Protocol):
    """Existence check against committed slugs."""

    def __call__(self, slug: str) -> bool:
        """Return True if a post already uses this slug."""
        ...
