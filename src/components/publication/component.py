"""
Publication component - which roles may set which publication status.

Rules:
- draft: any role
- published: roles ranked strictly above contributor (administrator, editor, author)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.components.hierarchy import rank
from src.domain.entities import PublicationStatus, RoleType

PUBLISH_NOT_PERMITTED = "publish not permitted for this role"


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of a publication policy check."""

    allowed: bool
    reason: str = ""


OK = PolicyDecision(allowed=True)


def can_publish(role: RoleType | None) -> bool:
    """Check whether a role may set status to published."""
    if role is None:
        return False
    return rank(role) < rank("contributor")


def authorize_status(role: RoleType | None, requested: PublicationStatus) -> PolicyDecision:
    """Decide whether a role may create or update a post with the requested status."""
    if requested == "draft":
        return OK
    if can_publish(role):
        return OK
    return PolicyDecision(allowed=False, reason=PUBLISH_NOT_PERMITTED)
