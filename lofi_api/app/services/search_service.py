"""
Search across the song catalog and the playlist store.

Matching is a case-insensitive substring test on song titles and
playlist names; there is no ranking.  Every authenticated user searches
the whole store, not just their own playlists.
"""

import logging

from ..core.db import Database
from ..core.policy import Identity
from ..schemas.search import SearchResult
from .playlist_service import row_to_playlist
from .song_service import row_to_song

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(self, db: Database, limit: int = 10) -> None:
        self._db = db
        self._limit = limit

    async def search(self, query: str, identity: Identity) -> SearchResult:
        """Return up to ``limit`` songs and playlists matching ``query``.

        An empty or whitespace-only query yields an empty result rather
        than the whole store.
        """
        text = query or ""
        if not text.strip():
            return SearchResult()
        songs = self._db.substring_search("songs", "title", text, self._limit)
        playlists = self._db.substring_search("playlists", "name", text, self._limit)
        logger.debug(
            "Search %r by %s: %d songs, %d playlists",
            text, identity.id, len(songs), len(playlists),
        )
        with self._db.cursor() as cursor:
            return SearchResult(
                songs=[row_to_song(row) for row in songs],
                playlists=[row_to_playlist(cursor, row) for row in playlists],
            )
