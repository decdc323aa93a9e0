import builtins
import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from src.components.posts import SlugConflictError
from src.domain.entities import Post, User


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class SQLitePostRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _params(self, post: Post) -> tuple[Any, ...]:
        return (
            str(post.id),
            post.title,
            post.slug,
            post.body,
            post.status,
            post.visibility,
            str(post.author_id),
            post.published_on.isoformat() if post.published_on else None,
            post.created_at.isoformat(),
        )

    def _write(self, sql: str, post: Post) -> Post:
        conn = self._get_conn()
        try:
            conn.execute(sql, self._params(post))
            conn.commit()
            return post
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "posts.slug" in str(e):
                raise SlugConflictError(post.slug) from e
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def insert(self, post: Post) -> Post:
        return self._write(
            """
            INSERT INTO posts (
                id, title, slug, body, status, visibility,
                author_id, published_on, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            post,
        )

    def save(self, post: Post) -> Post:
        # author_id and created_at are fixed at insert
        return self._write(
            """
            INSERT INTO posts (
                id, title, slug, body, status, visibility,
                author_id, published_on, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                slug=excluded.slug,
                body=excluded.body,
                status=excluded.status,
                visibility=excluded.visibility,
                published_on=excluded.published_on
            """,
            post,
        )

    def exists_by_slug(self, slug: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT 1 FROM posts WHERE slug = ?", (slug,)).fetchone()
            return row is not None
        finally:
            conn.close()

    def get_by_id(self, post_id: UUID) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def list_all(self) -> builtins.list[Post]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM posts ORDER BY created_at, id").fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            body=row["body"],
            status=row["status"],
            # unset visibility reads as public
            visibility=row["visibility"] or "public",
            author_id=UUID(row["author_id"]),
            published_on=_parse_dt(row["published_on"]),
            created_at=_parse_dt(row["created_at"]) or datetime.min,
        )


class SQLiteUserRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def save(self, user: User) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, role, first_name, last_name, avatar, is_associate, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    role=excluded.role,
                    first_name=excluded.first_name,
                    last_name=excluded.last_name,
                    avatar=excluded.avatar,
                    is_associate=excluded.is_associate
            """,
                (
                    str(user.id),
                    user.email,
                    user.role,
                    user.first_name,
                    user.last_name,
                    user.avatar,
                    int(user.is_associate),
                    user.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def get_by_id(self, user_id: UUID) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def get_many(self, user_ids: builtins.list[UUID]) -> dict[UUID, User]:
        if not user_ids:
            return {}
        conn = self._get_conn()
        try:
            placeholders = ", ".join("?" for _ in user_ids)
            rows = conn.execute(
                f"SELECT * FROM users WHERE id IN ({placeholders})",
                [str(u) for u in user_ids],
            ).fetchall()
            users = [self._map_row(row) for row in rows]
            return {u.id: u for u in users}
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            role=row["role"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            avatar=row["avatar"],
            is_associate=bool(row["is_associate"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
