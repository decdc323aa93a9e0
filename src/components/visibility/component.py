"""
Visibility component - per-post listing decisions and result ordering.

Decision per post:
- private + requester is the author: visible, any status
- private otherwise: hidden, whatever the role
- public: anonymous sees published only, any resolved role sees all
- ranked tier: resolved role must satisfy the tier, any status

A requester whose role could not be resolved reads as anonymous.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from src.components.hierarchy import RANKS, satisfies
from src.domain.entities import Post, Requester, VisibilityTier

ListingOrder = Literal["creation", "tier"]

DEFAULT_ORDER: ListingOrder = "creation"


def is_visible(post: Post, requester: Requester) -> bool:
    """Decide whether a post may appear in the requester's listing."""
    if post.visibility == "private":
        return not requester.is_anonymous and post.author_id == requester.user_id

    if post.visibility == "public":
        if requester.role is None:
            return post.status == "published"
        return True

    if requester.role is None:
        return False
    return satisfies(requester.role, post.visibility)


def tier_sort_key(tier: VisibilityTier) -> int:
    """Public first, then subscriber up to administrator, private last."""
    if tier == "private":
        return len(RANKS)
    return RANKS["public"] - RANKS[tier]


def _creation_key(post: Post) -> tuple[object, ...]:
    return (post.created_at, str(post.id))


def order_for(posts: Iterable[Post], order: ListingOrder = DEFAULT_ORDER) -> list[Post]:
    """
    Order posts for a listing.

    Args:
        posts: Posts to order.
        order: "creation" sorts by (created_at, id). "tier" groups by tier
            (public first, private last) and uses creation order within a tier.

    Returns:
        New list, stable and reproducible for identical input.
    """
    if order == "tier":
        return sorted(posts, key=lambda p: (tier_sort_key(p.visibility), *_creation_key(p)))
    if order == "creation":
        return sorted(posts, key=_creation_key)
    raise ValueError(f"Unknown listing order: {order}")


def filter_visible(posts: Iterable[Post], requester: Requester) -> list[Post]:
    """Keep the posts visible to the requester, preserving input order."""
    return [p for p in posts if is_visible(p, requester)]
