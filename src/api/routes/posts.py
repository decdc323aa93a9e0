import logging
from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.clock import SystemClock
from src.api.deps import (
    Identity,
    get_clock,
    get_identity,
    get_post_repo,
    get_rules,
    get_slug_config,
    get_user_repo,
)
from src.api.schemas import AuthorResponse, PostCreateRequest, PostResponse, PostUpdateRequest
from src.components.posts import (
    MISSING_AUTHENTICATION,
    POST_NOT_FOUND,
    CreatePostInput,
    PostError,
    PostRepoPort,
    SlugConflictError,
    UpdatePostInput,
    UserRepoPort,
    authorize_update,
    create_with_retry,
    list_visible,
)
from src.components.slugs import SlugConfig
from src.domain.entities import Post, User
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_KIND = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "invalid_request": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
}

INVALID_CREDENTIALS = "Invalid credentials"


def _raise_for(error: PostError | None) -> NoReturn:
    if error is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = {"WWW-Authenticate": "Bearer"} if error.kind == "unauthenticated" else None
    raise HTTPException(status_code=STATUS_BY_KIND[error.kind], detail=error.message, headers=headers)


def _reject_bad_token(identity: Identity) -> None:
    """A token that was sent but failed verification is a 401, not anonymous."""
    if identity.token_rejected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )


def _to_response(post: Post, authors: dict[UUID, User]) -> PostResponse:
    author = authors.get(post.author_id)
    return PostResponse(
        id=post.id,
        title=post.title,
        slug=post.slug,
        body=post.body,
        status=post.status,
        visibility=post.visibility,
        published_on=post.published_on,
        author=AuthorResponse(**author.model_dump(exclude={"created_at"})) if author else None,
    )


@router.get("", response_model=list[PostResponse])
def list_posts(
    identity: Identity = Depends(get_identity),
    repo: PostRepoPort = Depends(get_post_repo),
    user_repo: UserRepoPort = Depends(get_user_repo),
    rules: Rules = Depends(get_rules),
) -> list[PostResponse]:
    """List the posts visible to the caller. Anonymous callers are allowed."""
    result = list_visible(identity.requester, repo.list_all(), order=rules.listing.order)

    authors = user_repo.get_many(list({p.author_id for p in result.items}))
    return [_to_response(p, authors) for p in result.items]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    req: PostCreateRequest,
    identity: Identity = Depends(get_identity),
    repo: PostRepoPort = Depends(get_post_repo),
    user_repo: UserRepoPort = Depends(get_user_repo),
    rules: Rules = Depends(get_rules),
    slug_config: SlugConfig = Depends(get_slug_config),
    clock: SystemClock = Depends(get_clock),
) -> PostResponse:
    """Create a post as the calling user."""
    _reject_bad_token(identity)

    inp = CreatePostInput(
        title=req.title,
        body=req.body,
        slug=req.slug,
        status=req.status,
        visibility=req.visibility,
    )

    result = create_with_retry(
        inp,
        requester=identity.requester,
        user_exists=identity.user_exists,
        repo=repo,
        time=clock,
        slug_config=slug_config,
        retries=rules.create.conflict_retries,
    )
    if not result.success or result.post is None:
        _raise_for(result.error)

    logger.info("Post %s created with slug '%s'", result.post.id, result.post.slug)
    return _to_response(result.post, user_repo.get_many([result.post.author_id]))


@router.patch("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: UUID,
    req: PostUpdateRequest,
    identity: Identity = Depends(get_identity),
    repo: PostRepoPort = Depends(get_post_repo),
    user_repo: UserRepoPort = Depends(get_user_repo),
    slug_config: SlugConfig = Depends(get_slug_config),
    clock: SystemClock = Depends(get_clock),
) -> PostResponse:
    """Update a post; status may only move from draft to published."""
    _reject_bad_token(identity)
    if identity.requester.is_anonymous:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=MISSING_AUTHENTICATION,
            headers={"WWW-Authenticate": "Bearer"},
        )

    existing = repo.get_by_id(post_id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=POST_NOT_FOUND)

    inp = UpdatePostInput(
        title=req.title,
        body=req.body,
        slug=req.slug,
        status=req.status,
    )
    result = authorize_update(
        inp,
        post=existing,
        requester=identity.requester,
        user_exists=identity.user_exists,
        exists=repo.exists_by_slug,
        time=clock,
        slug_config=slug_config,
    )
    if not result.success or result.post is None:
        _raise_for(result.error)

    try:
        saved = repo.save(result.post)
    except SlugConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return _to_response(saved, user_repo.get_many([saved.author_id]))
