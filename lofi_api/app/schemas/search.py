"""
Pydantic schema for search results.
"""

from typing import List

from pydantic import BaseModel, Field

from .playlist import PlaylistRead
from .song import SongRead


class SearchResult(BaseModel):
    songs: List[SongRead] = Field(default_factory=list)
    playlists: List[PlaylistRead] = Field(default_factory=list)
