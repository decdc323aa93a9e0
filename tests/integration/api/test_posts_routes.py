"""Integration tests for the posts API routes."""

from datetime import timedelta
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.api.deps import Settings, get_settings
from src.api.main import app
from src.api.routes.posts import INVALID_CREDENTIALS
from src.components.posts import MISSING_AUTHENTICATION, NOT_ALLOWED, POST_NOT_FOUND
from src.components.publication import PUBLISH_NOT_PERMITTED
from src.domain.entities import ROLES, User
from tests.factories import issue_token, make_post

ROOT = Path(__file__).resolve().parents[3]

PAYLOAD = {
    "title": "My First Post",
    "slug": "my-first-post",
    "body": "This is my first post.",
    "status": "draft",
}


@pytest.fixture
def override_settings(db_path):
    def _settings():
        s = Settings()
        s.db_path = db_path
        s.rules_path = ROOT / "rules.yaml"
        return s

    app.dependency_overrides[get_settings] = _settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    return TestClient(app)


@pytest.fixture
def stored_users(db_path, users):
    repo = SQLiteUserRepo(db_path)
    for user in users.values():
        repo.save(user)
    return users


@pytest.fixture
def post_repo_db(db_path):
    return SQLitePostRepo(db_path)


def auth(user_id) -> dict[str, str]:
    token = issue_token(user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seeded(stored_users, post_repo_db):
    """One public published post plus a draft per ranked role tier."""
    admin = stored_users["administrator"]
    post_repo_db.insert(make_post(admin, 0, slug="my-first-post", status="published"))
    for i, tier in enumerate(ROLES):
        post_repo_db.insert(make_post(admin, i + 1, slug=f"my-first-post-{tier}", visibility=tier))
    return stored_users


class TestListPosts:
    def test_anonymous_sees_public_only(self, client, seeded):
        response = client.get("/api/posts")
        assert response.status_code == 200
        assert [p["slug"] for p in response.json()] == ["my-first-post"]

    def test_invalid_token_reads_as_anonymous(self, client, seeded):
        response = client.get("/api/posts", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_expired_token_reads_as_anonymous(self, client, seeded):
        token = issue_token(seeded["editor"].id, expires_delta=timedelta(minutes=-1))
        response = client.get("/api/posts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert [p["slug"] for p in response.json()] == ["my-first-post"]

    def test_editor_sees_five(self, client, seeded):
        response = client.get("/api/posts", headers=auth(seeded["editor"].id))
        assert response.status_code == 200
        visibilities = [p["visibility"] for p in response.json()]
        assert visibilities == ["public", "editor", "author", "contributor", "subscriber"]

    def test_administrator_sees_all(self, client, seeded):
        response = client.get("/api/posts", headers=auth(seeded["administrator"].id))
        assert len(response.json()) == 6

    def test_author_is_embedded(self, client, seeded):
        body = client.get("/api/posts").json()
        assert body[0]["author"]["email"] == "administrator@example.com"
        assert body[0]["author"]["role"] == "administrator"

    def test_private_post_only_for_owner(self, client, stored_users, post_repo_db):
        owner = stored_users["contributor"]
        post_repo_db.insert(make_post(owner, slug="secret", visibility="private"))

        mine = client.get("/api/posts", headers=auth(owner.id)).json()
        admin = client.get("/api/posts", headers=auth(stored_users["administrator"].id)).json()
        assert [p["slug"] for p in mine] == ["secret"]
        assert admin == []

    def test_empty_listing(self, client, stored_users):
        response = client.get("/api/posts")
        assert response.status_code == 200
        assert response.json() == []


class TestCreatePost:
    def test_missing_token_is_401(self, client, stored_users):
        response = client.post("/api/posts", json=PAYLOAD)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"] == MISSING_AUTHENTICATION

    def test_invalid_token_is_401(self, client, stored_users):
        response = client.post(
            "/api/posts", json=PAYLOAD, headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == INVALID_CREDENTIALS
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_expired_token_is_401(self, client, stored_users):
        token = issue_token(stored_users["editor"].id, expires_delta=timedelta(minutes=-1))
        response = client.post(
            "/api/posts", json=PAYLOAD, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == INVALID_CREDENTIALS

    def test_token_signed_with_other_key_is_401(self, client, stored_users):
        token = issue_token(stored_users["editor"].id, secret="someone-else")
        response = client.post(
            "/api/posts", json=PAYLOAD, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.json()["detail"] == INVALID_CREDENTIALS

    def test_unknown_user_is_403(self, client, stored_users):
        response = client.post("/api/posts", json=PAYLOAD, headers=auth(uuid4()))
        assert response.status_code == 403
        assert response.json()["detail"] == NOT_ALLOWED

    def test_subscriber_is_403(self, client, stored_users):
        response = client.post(
            "/api/posts", json=PAYLOAD, headers=auth(stored_users["subscriber"].id)
        )
        assert response.status_code == 403

    def test_contributor_publish_is_400(self, client, stored_users):
        payload = {**PAYLOAD, "status": "published"}
        response = client.post(
            "/api/posts", json=payload, headers=auth(stored_users["contributor"].id)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == PUBLISH_NOT_PERMITTED

    def test_contributor_draft_is_created(self, client, stored_users, post_repo_db):
        contributor = stored_users["contributor"]
        response = client.post("/api/posts", json=PAYLOAD, headers=auth(contributor.id))
        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "my-first-post"
        assert body["status"] == "draft"
        assert body["visibility"] == "public"
        assert body["published_on"] is None
        assert body["author"]["id"] == str(contributor.id)
        assert post_repo_db.exists_by_slug("my-first-post")

    def test_author_publish_stamps_published_on(self, client, stored_users):
        payload = {**PAYLOAD, "status": "published"}
        response = client.post("/api/posts", json=payload, headers=auth(stored_users["author"].id))
        assert response.status_code == 201
        assert response.json()["published_on"] is not None

    def test_slug_from_title(self, client, stored_users):
        payload = {"title": "My Post", "body": "This is a post."}
        response = client.post(
            "/api/posts", json=payload, headers=auth(stored_users["administrator"].id)
        )
        assert response.json()["slug"] == "my-post"

    def test_colliding_slugs_get_suffix(self, client, stored_users):
        headers = auth(stored_users["administrator"].id)
        first = client.post("/api/posts", json=PAYLOAD, headers=headers).json()
        second = client.post("/api/posts", json=PAYLOAD, headers=headers).json()
        derived = client.post(
            "/api/posts", json={"title": "My First Post", "body": "Again."}, headers=headers
        ).json()
        assert first["slug"] == "my-first-post"
        assert second["slug"] == "my-first-post-1"
        assert derived["slug"] == "my-first-post-2"

    def test_missing_title_is_422(self, client, stored_users):
        response = client.post(
            "/api/posts", json={"body": "No title"}, headers=auth(stored_users["editor"].id)
        )
        assert response.status_code == 422

    def test_unknown_visibility_is_422(self, client, stored_users):
        payload = {**PAYLOAD, "visibility": "members"}
        response = client.post("/api/posts", json=payload, headers=auth(stored_users["editor"].id))
        assert response.status_code == 422


class TestUpdatePost:
    @pytest.fixture
    def draft(self, stored_users, post_repo_db):
        return post_repo_db.insert(make_post(stored_users["author"], slug="draft-post"))

    def test_anonymous_is_401(self, client, draft):
        response = client.patch(f"/api/posts/{draft.id}", json={"title": "X"})
        assert response.status_code == 401

    def test_missing_post_is_404(self, client, stored_users):
        response = client.patch(
            f"/api/posts/{uuid4()}", json={"title": "X"}, headers=auth(stored_users["editor"].id)
        )
        assert response.status_code == 404

    def test_author_publishes_own_draft(self, client, stored_users, draft, post_repo_db):
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"status": "published"},
            headers=auth(stored_users["author"].id),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "published"
        stored = post_repo_db.get_by_id(draft.id)
        assert stored is not None
        assert stored.published_on is not None

    def test_cannot_unpublish(self, client, stored_users, post_repo_db):
        post = post_repo_db.insert(
            make_post(stored_users["author"], slug="live", status="published")
        )
        response = client.patch(
            f"/api/posts/{post.id}",
            json={"status": "draft"},
            headers=auth(stored_users["author"].id),
        )
        assert response.status_code == 400

    def test_other_contributor_is_403(self, client, stored_users, draft):
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"title": "Mine"},
            headers=auth(stored_users["contributor"].id),
        )
        assert response.status_code == 403

    def test_editor_edits_others(self, client, stored_users, draft):
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"body": "Edited by an editor."},
            headers=auth(stored_users["editor"].id),
        )
        assert response.status_code == 200
        assert response.json()["body"] == "Edited by an editor."
        assert response.json()["author"]["id"] == str(stored_users["author"].id)

    def test_slug_change_resolves_collision(self, client, stored_users, draft, post_repo_db):
        post_repo_db.insert(make_post(stored_users["editor"], 1, slug="taken"))
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"slug": "taken"},
            headers=auth(stored_users["author"].id),
        )
        assert response.status_code == 200
        assert response.json()["slug"] == "taken-1"

    def test_invalid_token_is_401(self, client, draft):
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"title": "X"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == INVALID_CREDENTIALS

    def test_visibility_cannot_be_changed(self, client, stored_users, draft, post_repo_db):
        response = client.patch(
            f"/api/posts/{draft.id}",
            json={"visibility": "administrator"},
            headers=auth(stored_users["author"].id),
        )
        assert response.status_code == 422
        stored = post_repo_db.get_by_id(draft.id)
        assert stored is not None
        assert stored.visibility == "public"

    def test_administrator_cannot_edit_others_private_post(
        self, client, stored_users, post_repo_db
    ):
        secret = post_repo_db.insert(
            make_post(stored_users["contributor"], slug="secret", visibility="private")
        )
        response = client.patch(
            f"/api/posts/{secret.id}",
            json={"title": "Hijacked", "status": "published"},
            headers=auth(stored_users["administrator"].id),
        )
        assert response.status_code == 404
        assert response.json()["detail"] == POST_NOT_FOUND
        stored = post_repo_db.get_by_id(secret.id)
        assert stored is not None
        assert stored.title == "My First Post"
        assert stored.status == "draft"

    def test_editor_cannot_edit_administrator_tier(self, client, stored_users, post_repo_db):
        post = post_repo_db.insert(
            make_post(stored_users["administrator"], slug="staff", visibility="administrator")
        )
        response = client.patch(
            f"/api/posts/{post.id}",
            json={"body": "Edited"},
            headers=auth(stored_users["editor"].id),
        )
        assert response.status_code == 404

    def test_owner_edits_own_private_post(self, client, stored_users, post_repo_db):
        secret = post_repo_db.insert(
            make_post(stored_users["contributor"], slug="secret", visibility="private")
        )
        response = client.patch(
            f"/api/posts/{secret.id}",
            json={"body": "Still mine"},
            headers=auth(stored_users["contributor"].id),
        )
        assert response.status_code == 200
        assert response.json()["visibility"] == "private"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
