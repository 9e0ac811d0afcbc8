"""
SQLite storage handle and simple migration system.

The ``Database`` class owns a single SQLite connection.  It is created
explicitly (see ``main.create_app`` and the command line), opened once
at process start and closed at shutdown; nothing in the package keeps a
global connection.  Services receive the handle in their constructor.

Users, songs and playlists each live in their own table.  The
relationships between them (liked songs, owned playlists, playlist
tracks) are stored in link tables with composite primary keys so that
"add if absent" and "remove if present" are single atomic statements.
There are no foreign keys: documents reference each other
by id only, like in a document store, and dangling ids are tolerated
by readers.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'regular',
            gender TEXT,
            date_of_birth TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS songs (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            artist TEXT NOT NULL,
            duration_seconds INTEGER NOT NULL,
            song_url TEXT,
            image_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS playlists (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            image_url TEXT NOT NULL DEFAULT '',
            owner_id TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS user_liked_songs (
            user_id TEXT NOT NULL,
            song_id TEXT NOT NULL,
            liked_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, song_id)
        );

        CREATE TABLE IF NOT EXISTS user_playlists (
            user_id TEXT NOT NULL,
            playlist_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            PRIMARY KEY (user_id, playlist_id)
        );

        CREATE TABLE IF NOT EXISTS playlist_songs (
            playlist_id TEXT NOT NULL,
            song_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            PRIMARY KEY (playlist_id, song_id)
        );
        """,
    ),
    # Migration 2: lookup indices for the relationship tables
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_playlists_owner_id ON playlists(owner_id);
        CREATE INDEX IF NOT EXISTS idx_user_playlists_playlist_id ON user_playlists(playlist_id);
        CREATE INDEX IF NOT EXISTS idx_playlist_songs_song_id ON playlist_songs(song_id);
        CREATE INDEX IF NOT EXISTS idx_user_liked_songs_song_id ON user_liked_songs(song_id);
        """,
    ),
]

# Columns that ``substring_search`` may query.  Table and column names
# cannot be bound as parameters, so only these pairs are accepted.
SEARCHABLE_FIELDS = {
    ("songs", "title"),
    ("playlists", "name"),
}
SAMPLEABLE_TABLES = {"songs", "playlists"}


def new_id() -> str:
    """Return a new opaque identifier (32 lowercase hex characters)."""
    return uuid.uuid4().hex


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    ``:memory:`` and absolute paths are returned as is.  Relative paths
    are resolved against the project root.
    """
    if database_url == MEMORY or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class Database:
    """Explicit handle on the SQLite store.

    Call :meth:`open` before use and :meth:`close` at shutdown.  All
    statements run through :meth:`cursor`, which serialises access to
    the shared connection and wraps each unit of work in a transaction.
    """

    def __init__(self, database_url: str) -> None:
        self.path = resolve_database_path(database_url)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "Database":
        if self._conn is not None:
            return self
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # SQLite's lower()/LIKE only fold ASCII; expose Python's casefold
        # so searches are case-insensitive for any script.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        self._conn = conn
        logger.info("Opened database %s", self.path)
        self.migrate()
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Closed database %s", self.path)

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction.

        Commits when the block exits normally and rolls back when it
        raises.  Nested use from the same thread joins the outer
        transaction.
        """
        if self._conn is None:
            raise RuntimeError("Database is not open")
        with self._lock:
            conn = self._conn
            self._depth += 1
            cursor = conn.cursor()
            try:
                yield cursor
                if self._depth == 1:
                    conn.commit()
            except BaseException:
                if self._depth == 1:
                    conn.rollback()
                raise
            finally:
                self._depth -= 1
                cursor.close()

    def migrate(self) -> None:
        """Apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks
        the current schema version, and applies any newer entries from
        ``MIGRATIONS``.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version <= current_version:
                continue
            # executescript commits on its own, so it cannot share the
            # transaction opened by cursor().
            with self._lock:
                self._conn.executescript(sql)
                self._conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                self._conn.commit()
            logger.info("Applied migration %s", version)
            current_version = version

    # ------------------------------------------------------------------
    # Query capabilities shared by the services
    # ------------------------------------------------------------------

    def substring_search(self, table: str, field: str, text: str, limit: int) -> List[sqlite3.Row]:
        """Return up to ``limit`` rows whose ``field`` contains ``text``.

        Matching is case-insensitive and literal: no wildcard characters
        are interpreted.  Rows come back in insertion order.
        """
        if (table, field) not in SEARCHABLE_FIELDS:
            raise ValueError(f"{table}.{field} is not searchable")
        with self.cursor() as cursor:
            return cursor.execute(
                f"SELECT * FROM {table} WHERE instr(casefold({field}), ?) > 0 "
                "ORDER BY rowid LIMIT ?",
                (text.casefold(), limit),
            ).fetchall()

    def random_sample(self, table: str, n: int) -> List[sqlite3.Row]:
        """Return up to ``n`` distinct rows chosen uniformly at random."""
        if table not in SAMPLEABLE_TABLES:
            raise ValueError(f"{table} cannot be sampled")
        with self.cursor() as cursor:
            return cursor.execute(
                f"SELECT * FROM {table} ORDER BY RANDOM() LIMIT ?",
                (max(n, 0),),
            ).fetchall()
