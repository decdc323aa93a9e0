"""Hierarchy component - role ranking and tier clearance checks."""

from src.components.hierarchy.component import (
    ANONYMOUS_RANK,
    RANKS,
    UnrankedTierError,
    is_at_least,
    rank,
    satisfies,
)

__all__ = [
    "ANONYMOUS_RANK",
    "RANKS",
    "UnrankedTierError",
    "is_at_least",
    "rank",
    "satisfies",
]
