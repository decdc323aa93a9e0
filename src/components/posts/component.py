"""
Posts component - authorization facade for creating, updating and listing posts.

Write path (create/update):
1. anonymous requester -> unauthenticated
2. no user record, or role below contributor -> forbidden
   (update) non-author: post hidden from them -> not_found, below editor -> forbidden
3. blank title/body -> invalid_request
4. publication policy on the requested status -> invalid_request
5. slug resolution, published_on stamped on the move to published

Read path (list): visibility filter, then listing order.

Nothing here persists; callers hand in pre-fetched data and an existence
check, and get back a post to store or a structured error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from src.components.hierarchy import is_at_least
from src.components.publication import authorize_status
from src.components.slugs import DEFAULT_SLUG_CONFIG, SlugConfig, SlugExistsPort, resolve_slug
from src.components.visibility import (
    DEFAULT_ORDER,
    ListingOrder,
    filter_visible,
    is_visible,
    order_for,
)
from src.domain.entities import Post, Requester

from .models import (
    CreatePostInput,
    PostError,
    PostListOutput,
    PostOperationOutput,
    UpdatePostInput,
)
from .ports import PostRepoPort, SlugConflictError, TimePort

logger = logging.getLogger(__name__)

MISSING_AUTHENTICATION = "Missing authentication"
NOT_ALLOWED = "You are not allowed to use this resource."
POST_NOT_FOUND = "Post not found"


def _fail(kind: Any, code: str, message: str, field: str | None = None) -> PostOperationOutput:
    return PostOperationOutput(
        post=None,
        errors=[PostError(kind=kind, code=code, message=message, field=field)],
        success=False,
    )


def _check_requester(requester: Requester, user_exists: bool) -> PostOperationOutput | None:
    """Identity gates shared by create and update."""
    if requester.is_anonymous:
        return _fail("unauthenticated", "missing_authentication", MISSING_AUTHENTICATION)

    if not user_exists or requester.role is None:
        logger.info("Write denied: user %s has no record", requester.user_id)
        return _fail("forbidden", "unknown_user", NOT_ALLOWED)

    if not is_at_least(requester.role, "contributor"):
        logger.info("Write denied: role %s below contributor", requester.role)
        return _fail("forbidden", "role_not_allowed", NOT_ALLOWED)

    return None


def _validate_fields(title: str | None, body: str | None) -> list[PostError]:
    errors: list[PostError] = []

    if title is not None and not title.strip():
        errors.append(
            PostError(
                kind="invalid_request",
                code="title_required",
                message="Title is required",
                field="title",
            )
        )

    if body is not None and not body.strip():
        errors.append(
            PostError(
                kind="invalid_request",
                code="body_required",
                message="Body is required",
                field="body",
            )
        )

    return errors


# --- Component Entry Points ---


def authorize_create(
    inp: CreatePostInput,
    *,
    requester: Requester,
    user_exists: bool,
    exists: SlugExistsPort,
    time: TimePort,
    slug_config: SlugConfig = DEFAULT_SLUG_CONFIG,
) -> PostOperationOutput:
    """
    Authorize and build a new post.

    Args:
        inp: Parsed create payload.
        requester: Resolved requester identity.
        user_exists: Whether the requester's user record was found.
        exists: Slug existence check against committed posts.
        time: Time port for timestamps.
        slug_config: Slug derivation settings.

    Returns:
        PostOperationOutput with the post to persist, or the failure.
    """
    denied = _check_requester(requester, user_exists)
    if denied:
        return denied

    errors = _validate_fields(inp.title, inp.body)
    if errors:
        return PostOperationOutput(post=None, errors=errors, success=False)

    status = inp.status or "draft"
    decision = authorize_status(requester.role, status)
    if not decision.allowed:
        logger.info("Publish denied for role %s", requester.role)
        return _fail("invalid_request", "publish_not_permitted", decision.reason, "status")

    slug = resolve_slug(inp.title, inp.slug, exists, slug_config)

    now = time.now_utc()
    assert requester.user_id is not None
    post = Post(
        id=uuid4(),
        title=inp.title,
        slug=slug,
        body=inp.body,
        status=status,
        visibility=inp.visibility or "public",
        author_id=requester.user_id,
        published_on=now if status == "published" else None,
        created_at=now,
    )
    return PostOperationOutput(post=post, errors=[], success=True)


def authorize_update(
    inp: UpdatePostInput,
    *,
    post: Post,
    requester: Requester,
    user_exists: bool,
    exists: SlugExistsPort,
    time: TimePort,
    slug_config: SlugConfig = DEFAULT_SLUG_CONFIG,
) -> PostOperationOutput:
    """
    Authorize and apply a partial update to an existing post.

    The author may edit their own post. Anyone else must be an editor or
    above and able to see the post; a post hidden from the requester (every
    private post of another user among them) reads as not found. Status
    moves one way, draft to published; published_on is stamped once and then
    kept. Author and visibility are never changed.
    """
    denied = _check_requester(requester, user_exists)
    if denied:
        return denied

    if post.author_id != requester.user_id:
        # private posts are never visible to anyone but the author
        if not is_visible(post, requester):
            logger.info("Edit denied: post %s hidden from %s", post.id, requester.user_id)
            return _fail("not_found", "post_not_found", POST_NOT_FOUND)
        if not is_at_least(requester.role, "editor"):
            logger.info("Edit denied: %s is not the author of post %s", requester.user_id, post.id)
            return _fail("forbidden", "not_author", NOT_ALLOWED)

    errors = _validate_fields(inp.title, inp.body)
    if errors:
        return PostOperationOutput(post=post, errors=errors, success=False)

    updates: dict[str, Any] = {}

    if inp.status is not None and inp.status != post.status:
        if post.status == "published":
            return _fail(
                "invalid_request",
                "invalid_transition",
                "status cannot move from published back to draft",
                "status",
            )
        decision = authorize_status(requester.role, inp.status)
        if not decision.allowed:
            logger.info("Publish denied for role %s", requester.role)
            return _fail("invalid_request", "publish_not_permitted", decision.reason, "status")
        updates["status"] = inp.status
        updates["published_on"] = time.now_utc()

    if inp.title is not None:
        updates["title"] = inp.title
    if inp.body is not None:
        updates["body"] = inp.body

    if inp.slug is not None:
        own_slug = post.slug

        def _taken(candidate: str) -> bool:
            return candidate != own_slug and exists(candidate)

        updates["slug"] = resolve_slug(inp.title or post.title, inp.slug, _taken, slug_config)

    return PostOperationOutput(post=post.model_copy(update=updates), errors=[], success=True)


def list_visible(
    requester: Requester,
    posts: Iterable[Post],
    *,
    order: ListingOrder = DEFAULT_ORDER,
) -> PostListOutput:
    """
    List the posts the requester may see.

    Args:
        requester: Resolved requester identity (anonymous allowed).
        posts: Every candidate post, already fetched.
        order: Listing order strategy.

    Returns:
        PostListOutput with visible posts in listing order.
    """
    items = order_for(filter_visible(posts, requester), order)
    return PostListOutput(items=items, total=len(items), errors=[], success=True)


def create_with_retry(
    inp: CreatePostInput,
    *,
    requester: Requester,
    user_exists: bool,
    repo: PostRepoPort,
    time: TimePort,
    slug_config: SlugConfig = DEFAULT_SLUG_CONFIG,
    retries: int = 1,
) -> PostOperationOutput:
    """
    Authorize, build and insert a post.

    A duplicate slug reported by the repository at insert time re-runs slug
    resolution up to ``retries`` times; after that the failure is returned
    as a retryable conflict.
    """
    result = authorize_create(
        inp,
        requester=requester,
        user_exists=user_exists,
        exists=repo.exists_by_slug,
        time=time,
        slug_config=slug_config,
    )
    if not result.success or result.post is None:
        return result

    post = result.post
    attempt = 0
    while True:
        try:
            saved = repo.insert(post)
            return PostOperationOutput(post=saved, errors=[], success=True)
        except SlugConflictError as e:
            if attempt >= retries:
                logger.warning("Slug '%s' still conflicting after %d retries", e.slug, retries)
                return _fail("conflict", "slug_conflict", str(e), "slug")
            attempt += 1
            logger.warning("Slug '%s' taken at insert, re-resolving (attempt %d)", e.slug, attempt)
            slug = resolve_slug(inp.title, inp.slug, repo.exists_by_slug, slug_config)
            post = post.model_copy(update={"slug": slug})
