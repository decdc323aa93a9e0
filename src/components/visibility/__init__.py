"""Visibility component - listing filter and ordering."""

from src.components.visibility.component import (
    DEFAULT_ORDER,
    ListingOrder,
    filter_visible,
    is_visible,
    order_for,
    tier_sort_key,
)

__all__ = [
    "DEFAULT_ORDER",
    "ListingOrder",
    "filter_visible",
    "is_visible",
    "order_for",
    "tier_sort_key",
]
