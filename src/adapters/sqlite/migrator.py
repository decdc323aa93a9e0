"""
SQL file migrations for the posts database.

Each ``migrations/NNNN_name.sql`` file holds an Up script, optionally
followed by a ``-- Down`` section that is kept for manual rollback and never
run here. Applied files are recorded by name in ``_migrations``.
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


@dataclass(frozen=True)
class Migration:
    name: str
    up: str


def read_migration(path: Path) -> Migration:
    up, _, _down = path.read_text().partition(DOWN_MARKER)
    return Migration(name=path.name, up=up)


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def pending(self, conn: sqlite3.Connection) -> list[Migration]:
        """Migrations not yet recorded, in file name order."""
        applied = {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        return [
            read_migration(path)
            for path in sorted(self.migrations_dir.glob("*.sql"))
            if path.name not in applied
        ]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the file names applied."""
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS _migrations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    filename TEXT UNIQUE NOT NULL,
                    applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()

            applied_now: list[str] = []
            for migration in self.pending(conn):
                logger.info("Applying migration: %s", migration.name)
                self._apply(conn, migration)
                applied_now.append(migration.name)
            return applied_now
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.executescript(f"BEGIN;\n{migration.up}\nCOMMIT;")
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (migration.name,))
            conn.commit()
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            raise RuntimeError(f"Migration {migration.name} failed: {e}") from e
