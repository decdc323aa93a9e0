"""
Slugs component - slug derivation and collision resolution.

Derivation: NFKD transliteration to ASCII, lower-case, runs of anything that
is not [a-z0-9] collapse to one hyphen, hyphens trimmed at both ends.

Collision: base, base-1, base-2, ... first candidate the existence check
reports as free wins. One existence check per candidate.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass

from .ports import SlugExistsPort

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class SlugConfig:
    """Slug derivation settings."""

    max_length: int | None = None
    fallback: str = "post"


DEFAULT_SLUG_CONFIG = SlugConfig()


def slugify(text: str) -> str:
    """Create URL-safe slug from text."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", ascii_text.lower()).strip("-")


def _truncate(slug: str, max_length: int | None) -> str:
    if not max_length or len(slug) <= max_length:
        return slug
    cut = slug[:max_length]
    # Prefer a word boundary unless the cut already landed on one
    if slug[max_length] != "-" and "-" in cut:
        cut = cut.rsplit("-", 1)[0]
    return cut.strip("-")


def base_slug(
    title: str,
    explicit_slug: str | None = None,
    config: SlugConfig = DEFAULT_SLUG_CONFIG,
) -> str:
    """Pick the base candidate: explicit slug when usable, else derived from title."""
    base = slugify(explicit_slug) if explicit_slug else ""
    if not base:
        base = slugify(title)
    base = _truncate(base, config.max_length)
    return base or config.fallback


def resolve_slug(
    title: str,
    explicit_slug: str | None,
    exists: SlugExistsPort,
    config: SlugConfig = DEFAULT_SLUG_CONFIG,
) -> str:
    """
    Resolve a unique slug for a post.

    Args:
        title: Post title, used when no explicit slug is given.
        explicit_slug: Caller supplied slug, optional.
        exists: Existence check against committed slugs.
        config: Slug derivation settings.

    Returns:
        The base candidate if free, else the first free ``base-N`` (N >= 1).
    """
    candidate = base_slug(title, explicit_slug, config)
    if not exists(candidate):
        return candidate

    n = 1
    while exists(f"{candidate}-{n}"):
        n += 1
    logger.debug("Slug '%s' taken, resolved to '%s-%d'", candidate, candidate, n)
    return f"{candidate}-{n}"
