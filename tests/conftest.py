from pathlib import Path

import pytest

from src.adapters.clock import FrozenClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.domain.entities import ROLES, Requester, User
from tests.factories import NOW, InMemoryPostRepo

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def users() -> dict[str, User]:
    """One user per role, keyed by role name."""
    return {role: User(email=f"{role}@example.com", role=role) for role in ROLES}


@pytest.fixture
def requesters(users) -> dict[str, Requester]:
    """Requester per role plus 'anonymous'."""
    out = {role: Requester.for_user(user) for role, user in users.items()}
    out["anonymous"] = Requester.anonymous()
    return out


@pytest.fixture
def post_repo() -> InMemoryPostRepo:
    return InMemoryPostRepo()


@pytest.fixture
def migrations_dir() -> str:
    return str(ROOT / "migrations")


@pytest.fixture
def db_path(tmp_path, migrations_dir) -> str:
    """A migrated SQLite database in a temp dir."""
    path = str(tmp_path / "posts.db")
    SQLiteMigrator(path, migrations_dir).run_migrations()
    return path
