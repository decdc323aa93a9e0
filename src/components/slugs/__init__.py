"""Slugs component - slug derivation and collision-safe uniqueness."""

from src.components.slugs.component import (
    DEFAULT_SLUG_CONFIG,
    SlugConfig,
    base_slug,
    resolve_slug,
    slugify,
)
from src.components.slugs.ports import SlugExistsPort

__all__ = [
    "DEFAULT_SLUG_CONFIG",
    "SlugConfig",
    "SlugExistsPort",
    "base_slug",
    "resolve_slug",
    "slugify",
]
