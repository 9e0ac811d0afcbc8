"""
Service layer for playlists.

A playlist belongs to exactly one user, set when it is created.  The
owner's ``playlists`` list (``user_playlists``) and the playlist's
ordered ``song_ids`` (``playlist_songs``) are link tables, so adding a
song is an atomic "insert if absent" and removing one is an atomic
"delete if present".  Operations touching both the playlist and its
owner's list run in a single transaction.

Ownership is checked through ``core.policy`` on every mutating call;
nothing about it is cached between requests.
"""

import logging
import sqlite3
from typing import List, Optional, Tuple

from ..core.db import Database, new_id
from ..core.exceptions import NotFound, ValidationError
from ..core.policy import Action, Identity, Resource, enforce
from ..schemas.playlist import PlaylistRead, PlaylistWithSongs, PlaylistWrite
from .song_service import SONG_FIELDS, row_to_song

logger = logging.getLogger(__name__)

PLAYLIST_NOT_FOUND = "Playlist not found"
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def checked_fields(data: PlaylistWrite) -> Tuple[str, str, str]:
    """Return ``(name, description, image_url)`` or raise ``ValidationError``."""
    name = (data.name or "").strip()
    description = data.description or ""
    if not name:
        raise ValidationError("Playlist name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Playlist name must be at most {NAME_MAX_LENGTH} characters")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    return name, description, data.image_url or ""


def row_to_playlist(cursor: sqlite3.Cursor, row: sqlite3.Row) -> PlaylistRead:
    """Build a ``PlaylistRead`` from a playlist row and its song links."""
    songs = cursor.execute(
        "SELECT song_id FROM playlist_songs WHERE playlist_id = ? ORDER BY position",
        (row["id"],),
    ).fetchall()
    return PlaylistRead(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        image_url=row["image_url"],
        owner_id=row["owner_id"],
        song_ids=[s["song_id"] for s in songs],
    )


class PlaylistService:
    """Relationship manager for users, playlists and songs."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def create_playlist(self, identity: Identity, data: PlaylistWrite) -> PlaylistRead:
        """Create a playlist owned by the caller and append it to their list."""
        enforce(identity, Action.CREATE, Resource.playlist(identity.id))
        name, description, image_url = checked_fields(data)
        playlist_id = new_id()
        with self._db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM users WHERE id = ?", (identity.id,)).fetchone():
                raise NotFound("User not found")
            cursor.execute(
                "INSERT INTO playlists (id, name, description, image_url, owner_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (playlist_id, name, description, image_url, identity.id),
            )
            cursor.execute(
                "INSERT OR IGNORE INTO user_playlists (user_id, playlist_id, position) "
                "SELECT ?, ?, COALESCE(MAX(position), -1) + 1 FROM user_playlists WHERE user_id = ?",
                (identity.id, playlist_id, identity.id),
            )
            playlist = self._load_playlist(cursor, playlist_id)
        logger.info("User %s created playlist %s", identity.id, playlist_id)
        return playlist

    async def edit_playlist(self, identity: Identity, playlist_id: str, data: PlaylistWrite) -> PlaylistRead:
        """Overwrite name, description and image of an owned playlist."""
        with self._db.cursor() as cursor:
            playlist = self._get_owned(cursor, identity, Action.UPDATE, playlist_id)
            name, description, image_url = checked_fields(data)
            cursor.execute(
                "UPDATE playlists SET name = ?, description = ?, image_url = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (name, description, image_url, playlist.id),
            )
            playlist = self._load_playlist(cursor, playlist_id)
        logger.info("User %s edited playlist %s", identity.id, playlist_id)
        return playlist

    async def add_song(self, identity: Identity, playlist_id: str, song_id: str) -> PlaylistRead:
        """Append a song to an owned playlist unless it is already there."""
        with self._db.cursor() as cursor:
            self._get_owned(cursor, identity, Action.ADD_SONG, playlist_id)
            if not cursor.execute("SELECT 1 FROM songs WHERE id = ?", (song_id,)).fetchone():
                raise NotFound("Song not found")
            cursor.execute(
                "INSERT OR IGNORE INTO playlist_songs (playlist_id, song_id, position) "
                "SELECT ?, ?, COALESCE(MAX(position), -1) + 1 FROM playlist_songs WHERE playlist_id = ?",
                (playlist_id, song_id, playlist_id),
            )
            if cursor.rowcount:
                logger.info("Added song %s to playlist %s", song_id, playlist_id)
            return self._load_playlist(cursor, playlist_id)

    async def remove_song(self, identity: Identity, playlist_id: str, song_id: str) -> PlaylistRead:
        """Remove a song from an owned playlist; absent songs are a no-op."""
        with self._db.cursor() as cursor:
            self._get_owned(cursor, identity, Action.REMOVE_SONG, playlist_id)
            cursor.execute(
                "DELETE FROM playlist_songs WHERE playlist_id = ? AND song_id = ?",
                (playlist_id, song_id),
            )
            if cursor.rowcount:
                logger.info("Removed song %s from playlist %s", song_id, playlist_id)
            return self._load_playlist(cursor, playlist_id)

    async def delete_playlist(self, identity: Identity, playlist_id: str) -> None:
        """Delete an owned playlist and unlink it from the owner's list."""
        with self._db.cursor() as cursor:
            playlist = self._get_owned(cursor, identity, Action.DELETE, playlist_id)
            cursor.execute(
                "DELETE FROM user_playlists WHERE user_id = ? AND playlist_id = ?",
                (playlist.owner_id, playlist_id),
            )
            cursor.execute("DELETE FROM playlist_songs WHERE playlist_id = ?", (playlist_id,))
            cursor.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
        logger.info("User %s deleted playlist %s", identity.id, playlist_id)

    async def list_favourite_playlists(self, user_id: str) -> List[PlaylistRead]:
        """Return the playlists in the user's list, in list order."""
        with self._db.cursor() as cursor:
            rows = cursor.execute(
                "SELECT p.id FROM user_playlists up JOIN playlists p ON p.id = up.playlist_id "
                "WHERE up.user_id = ? ORDER BY up.position",
                (user_id,),
            ).fetchall()
            return [self._load_playlist(cursor, row["id"]) for row in rows]

    async def random_playlists(self, n: int = 10) -> List[PlaylistRead]:
        """Return up to ``n`` distinct playlists chosen at random."""
        rows = self._db.random_sample("playlists", n)
        with self._db.cursor() as cursor:
            return [row_to_playlist(cursor, row) for row in rows]

    async def list_playlists(self) -> List[PlaylistRead]:
        with self._db.cursor() as cursor:
            rows = cursor.execute("SELECT * FROM playlists ORDER BY rowid").fetchall()
            return [row_to_playlist(cursor, row) for row in rows]

    async def get_playlist(self, playlist_id: str) -> Optional[PlaylistRead]:
        with self._db.cursor() as cursor:
            return self._load_playlist(cursor, playlist_id)

    async def get_playlist_with_songs(self, playlist_id: str) -> PlaylistWithSongs:
        """Return a playlist and the songs its ids resolve to.

        Ids of deleted songs stay in ``playlist.song_ids`` but have no
        entry in ``songs``.
        """
        with self._db.cursor() as cursor:
            playlist = self._load_playlist(cursor, playlist_id)
            if playlist is None:
                raise NotFound(PLAYLIST_NOT_FOUND)
            rows = cursor.execute(
                f"SELECT {', '.join('s.' + field for field in SONG_FIELDS)} "
                "FROM playlist_songs ps JOIN songs s ON s.id = ps.song_id "
                "WHERE ps.playlist_id = ? ORDER BY ps.position",
                (playlist_id,),
            ).fetchall()
        return PlaylistWithSongs(playlist=playlist, songs=[row_to_song(row) for row in rows])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned(self, cursor: sqlite3.Cursor, identity: Identity, action: Action,
                   playlist_id: str) -> PlaylistRead:
        playlist = self._load_playlist(cursor, playlist_id)
        if playlist is None:
            raise NotFound(PLAYLIST_NOT_FOUND)
        enforce(identity, action, Resource.playlist(playlist.owner_id))
        return playlist

    def _load_playlist(self, cursor: sqlite3.Cursor, playlist_id: str) -> Optional[PlaylistRead]:
        row = cursor.execute("SELECT * FROM playlists WHERE id = ?", (playlist_id,)).fetchone()
        return row_to_playlist(cursor, row) if row else None
