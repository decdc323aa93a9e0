import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.api.auth_utils import InvalidTokenError, subject_from_token
from src.components.posts import UserRepoPort
from src.components.slugs import SlugConfig
from src.domain.entities import Requester
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        data_dir = os.environ.get("POSTS_DATA_DIR", "./data")
        self.db_path = f"{data_dir}/posts.db"
        self.migrations_dir = str(self.base_dir / "migrations")
        self.rules_path = Path(os.environ.get("POSTS_RULES_PATH", str(self.base_dir / "rules.yaml")))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


def get_slug_config(rules: Rules = Depends(get_rules)) -> SlugConfig:
    return SlugConfig(max_length=rules.slug.max_length, fallback=rules.slug.fallback)


# --- Repos ---
def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Requester plus whether a user record backs it.

    ``token_rejected`` marks a bearer token that was sent but failed
    verification; the requester is then anonymous.
    """

    requester: Requester
    user_exists: bool
    token_rejected: bool = False


ANONYMOUS = Identity(requester=Requester.anonymous(), user_exists=False)
REJECTED = Identity(requester=Requester.anonymous(), user_exists=False, token_rejected=True)


def get_identity(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: UserRepoPort = Depends(get_user_repo),
) -> Identity:
    """
    Resolve the requester from a bearer token.

    Missing and rejected tokens both resolve to anonymous; routes decide
    whether anonymous is acceptable and how to report a rejected token.
    """
    if not token:
        return ANONYMOUS

    try:
        user_id = subject_from_token(token)
    except InvalidTokenError as e:
        logger.info("Bearer token rejected: %s", e)
        return REJECTED

    user = user_repo.get_by_id(user_id)
    if user is None:
        return Identity(requester=Requester(user_id=user_id), user_exists=False)
    return Identity(requester=Requester.for_user(user), user_exists=True)
