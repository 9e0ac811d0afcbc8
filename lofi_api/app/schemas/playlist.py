"""
Pydantic schemas for playlists.

Request bodies accept both the Python field names and the short wire
names used by the web client (``desc``, ``img``, ``playListId`` and
``songId``).
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .common import ID_PATTERN
from .song import SongRead


class PlaylistWrite(BaseModel):
    """Fields a playlist owner can set.

    Used both for creation and for edits.  Edits overwrite every field,
    so omitting ``description`` or ``image_url`` clears it.  The body is
    only parsed here; the playlist service checks the values after it
    has checked ownership, so a stranger's edit is refused whatever it
    contains.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field("", examples=["Late night study"])
    description: Optional[str] = Field(
        "",
        validation_alias=AliasChoices("description", "desc"),
    )
    image_url: Optional[str] = Field(
        "",
        validation_alias=AliasChoices("image_url", "img"),
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> str:
        return (v or "").strip()


class PlaylistSongChange(BaseModel):
    """Body of the add-song and remove-song endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    playlist_id: str = Field(
        ...,
        pattern=ID_PATTERN,
        validation_alias=AliasChoices("playlist_id", "playListId"),
    )
    song_id: str = Field(
        ...,
        pattern=ID_PATTERN,
        validation_alias=AliasChoices("song_id", "songId"),
    )


class PlaylistRead(BaseModel):
    id: str
    name: str
    description: str = ""
    image_url: str = ""
    owner_id: str
    song_ids: List[str] = Field(default_factory=list)


class PlaylistWithSongs(BaseModel):
    """A playlist together with the songs its ids still resolve to."""

    playlist: PlaylistRead
    songs: List[SongRead]
