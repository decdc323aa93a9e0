"""
Hierarchy component - fixed role ranking and tier clearance.

Rank (lower = more privileged):
- administrator=0, editor=1, author=2, contributor=3, subscriber=4, public=5
- anonymous compares as public
- private is outside the ranking; only the ownership override grants it
"""

from __future__ import annotations

from src.domain.entities import RoleType, VisibilityTier

RANKS: dict[VisibilityTier, int] = {
    "administrator": 0,
    "editor": 1,
    "author": 2,
    "contributor": 3,
    "subscriber": 4,
    "public": 5,
}

ANONYMOUS_RANK = RANKS["public"]


class UnrankedTierError(KeyError):
    """Raised when a rank is requested for a tier outside the hierarchy."""

    def __init__(self, tier: str) -> None:
        self.tier = tier
        super().__init__(f"Tier '{tier}' has no rank")


def rank(role_or_tier: RoleType | VisibilityTier | None) -> int:
    """Return the rank of a role or ranked tier. None is the anonymous requester."""
    if role_or_tier is None:
        return ANONYMOUS_RANK
    try:
        return RANKS[role_or_tier]
    except KeyError:
        raise UnrankedTierError(role_or_tier) from None


def satisfies(role: RoleType | None, required: VisibilityTier) -> bool:
    """Check whether a role (None = anonymous) clears the required tier."""
    if required not in RANKS:
        return False
    return rank(role) <= RANKS[required]


def is_at_least(role: RoleType | None, minimum: RoleType) -> bool:
    """Check whether a resolved role is at or above another role."""
    if role is None:
        return False
    return satisfies(role, minimum)
