"""
Posts component - authorization facade over hierarchy, publication, slugs
and visibility.
"""

from .component import (
    MISSING_AUTHENTICATION,
    NOT_ALLOWED,
    POST_NOT_FOUND,
    authorize_create,
    authorize_update,
    create_with_retry,
    list_visible,
)
from .models import (
    CreatePostInput,
    ErrorKind,
    PostError,
    PostListOutput,
    PostOperationOutput,
    UpdatePostInput,
)
from .ports import PostRepoPort, SlugConflictError, TimePort, UserRepoPort

__all__ = [
    # Entry points
    "authorize_create",
    "authorize_update",
    "create_with_retry",
    "list_visible",
    # Input models
    "CreatePostInput",
    "UpdatePostInput",
    # Output models
    "ErrorKind",
    "PostError",
    "PostListOutput",
    "PostOperationOutput",
    # Ports
    "PostRepoPort",
    "SlugConflictError",
    "TimePort",
    "UserRepoPort",
    # Messages
    "MISSING_AUTHENTICATION",
    "NOT_ALLOWED",
    "POST_NOT_FOUND",
]
