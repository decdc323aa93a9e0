"""Publication component - publish permission checks."""

from src.components.publication.component import (
    OK,
    PUBLISH_NOT_PERMITTED,
    PolicyDecision,
    authorize_status,
    can_publish,
)

__all__ = [
    "OK",
    "PUBLISH_NOT_PERMITTED",
    "PolicyDecision",
    "authorize_status",
    "can_publish",
]
