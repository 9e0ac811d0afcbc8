"""
Pydantic schemas for catalog songs.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SongBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Lofi Dreams"])
    artist: str = Field(..., min_length=1, max_length=200, examples=["Chillhop Crew"])
    duration_seconds: int = Field(..., ge=0, examples=[184])
    song_url: Optional[str] = Field(None, description="Location of the audio file")
    image_url: Optional[str] = Field(None, description="Cover artwork")


class SongCreate(SongBase):
    """Schema for adding a song to the catalog."""


class SongUpdate(BaseModel):
    """Schema for updating a song.

    All fields are optional; only provided values will be updated.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    artist: Optional[str] = Field(None, min_length=1, max_length=200)
    duration_seconds: Optional[int] = Field(None, ge=0)
    song_url: Optional[str] = None
    image_url: Optional[str] = None


class SongRead(SongBase):
    id: str


class LikeChange(str, Enum):
    """Which branch a like toggle took."""

    ADDED = "added"
    REMOVED = "removed"
