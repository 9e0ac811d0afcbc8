"""
FastAPI dependencies that hand services to the endpoints.

The ``Database`` handle and the ``Settings`` live on ``app.state``; they
are created by ``main.create_app`` and opened/closed with the
application's lifespan.
"""

from typing import Annotated

from fastapi import Depends, Path, Request

from ..core.config import Settings
from ..core.db import Database
from ..schemas.common import ID_PATTERN
from ..services.playlist_service import PlaylistService
from ..services.search_service import SearchService
from ..services.song_service import SongService
from ..services.user_service import UserService

# Path parameter holding an opaque id; anything else is rejected with 400.
ObjectId = Annotated[str, Path(pattern=ID_PATTERN, description="Opaque 32 hex character id")]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_user_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(db, settings)


def get_song_service(db: Database = Depends(get_db)) -> SongService:
    return SongService(db)


def get_playlist_service(db: Database = Depends(get_db)) -> PlaylistService:
    return PlaylistService(db)


def get_search_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SearchService:
    return SearchService(db, limit=settings.search_limit)
