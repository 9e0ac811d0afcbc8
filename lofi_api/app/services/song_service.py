"""
Service layer for the song catalog and liked songs.

Only administrators create, update or delete songs; listing is open to
everybody.  Likes are a per-user set stored in ``user_liked_songs``;
:meth:`SongService.toggle_like` flips membership with single-statement
set operations instead of rewriting the whole list.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import Database, new_id
from ..core.exceptions import NotFound
from ..core.policy import Action, Identity, Resource, enforce
from ..schemas.song import LikeChange, SongCreate, SongRead, SongUpdate

logger = logging.getLogger(__name__)

SONG_FIELDS = ("id", "title", "artist", "duration_seconds", "song_url", "image_url")
SONG_COLUMNS = ", ".join(SONG_FIELDS)


def row_to_song(row: sqlite3.Row) -> SongRead:
    return SongRead(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        duration_seconds=row["duration_seconds"],
        song_url=row["song_url"],
        image_url=row["image_url"],
    )


class SongService:
    """Service class for catalog songs."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def create_song(self, identity: Identity, data: SongCreate) -> SongRead:
        enforce(identity, Action.CREATE, Resource.song())
        song_id = new_id()
        with self._db.cursor() as cursor:
            cursor.execute(
                "INSERT INTO songs (id, title, artist, duration_seconds, song_url, image_url) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (song_id, data.title, data.artist, data.duration_seconds, data.song_url, data.image_url),
            )
            row = cursor.execute(f"SELECT {SONG_COLUMNS} FROM songs WHERE id = ?", (song_id,)).fetchone()
        logger.info("Created song %s (%s - %s)", song_id, data.artist, data.title)
        return row_to_song(row)

    async def list_songs(self) -> List[SongRead]:
        """Return the whole catalog in insertion order."""
        with self._db.cursor() as cursor:
            rows = cursor.execute(f"SELECT {SONG_COLUMNS} FROM songs ORDER BY rowid").fetchall()
        return [row_to_song(row) for row in rows]

    async def get_song(self, song_id: str) -> Optional[SongRead]:
        with self._db.cursor() as cursor:
            row = cursor.execute(f"SELECT {SONG_COLUMNS} FROM songs WHERE id = ?", (song_id,)).fetchone()
        return row_to_song(row) if row else None

    async def update_song(self, identity: Identity, song_id: str, data: SongUpdate) -> SongRead:
        """Update the provided fields of a song.

        ``title``, ``artist`` and ``duration_seconds`` cannot be
        cleared; explicit nulls for them are ignored.
        """
        enforce(identity, Action.UPDATE, Resource.song())
        updates = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in ("song_url", "image_url")
        }
        with self._db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM songs WHERE id = ?", (song_id,)).fetchone():
                raise NotFound("Song not found")
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE songs SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), song_id),
                )
                logger.info("Updated song %s", song_id)
            row = cursor.execute(f"SELECT {SONG_COLUMNS} FROM songs WHERE id = ?", (song_id,)).fetchone()
        return row_to_song(row)

    async def delete_song(self, identity: Identity, song_id: str) -> None:
        """Delete a song from the catalog.

        Playlists and liked-song sets that reference it keep the id;
        readers skip ids that no longer resolve.
        """
        enforce(identity, Action.DELETE, Resource.song())
        with self._db.cursor() as cursor:
            cursor.execute("DELETE FROM songs WHERE id = ?", (song_id,))
            if cursor.rowcount == 0:
                raise NotFound("Song not found")
        logger.info("Deleted song %s", song_id)

    async def toggle_like(self, identity: Identity, song_id: str) -> LikeChange:
        """Like the song if the user has not liked it yet, otherwise unlike it.

        Calling it twice restores the original state.  Raises
        ``NotFound`` when the song (or the calling user) does not exist.
        """
        enforce(identity, Action.LIKE, Resource.song())
        with self._db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM songs WHERE id = ?", (song_id,)).fetchone():
                raise NotFound("Song does not exist")
            if not cursor.execute("SELECT 1 FROM users WHERE id = ?", (identity.id,)).fetchone():
                raise NotFound("User not found")
            cursor.execute(
                "DELETE FROM user_liked_songs WHERE user_id = ? AND song_id = ?",
                (identity.id, song_id),
            )
            if cursor.rowcount:
                change = LikeChange.REMOVED
            else:
                cursor.execute(
                    "INSERT OR IGNORE INTO user_liked_songs (user_id, song_id) VALUES (?, ?)",
                    (identity.id, song_id),
                )
                change = LikeChange.ADDED
        logger.info("User %s %s like on song %s", identity.id, change.value, song_id)
        return change

    async def list_liked_songs(self, user_id: str) -> List[SongRead]:
        """Return the songs the user liked, in catalog order.

        Liked ids whose song has been deleted are skipped.
        """
        with self._db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {SONG_COLUMNS} FROM songs "
                "WHERE id IN (SELECT song_id FROM user_liked_songs WHERE user_id = ?) "
                "ORDER BY rowid",
                (user_id,),
            ).fetchall()
        return [row_to_song(row) for row in rows]
