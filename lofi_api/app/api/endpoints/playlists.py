"""
Playlist endpoints.

Every route requires authentication.  Reading playlists is open to any
user; editing, changing songs and deleting are reserved to the owner
(403 otherwise).  Fixed paths (``/edit``, ``/add-song``,
``/remove-song``, ``/favourite``, ``/random``) are declared before
``/{playlist_id}``.
"""

from typing import List

from fastapi import APIRouter, Depends

from ...core.config import Settings
from ...core.policy import Identity
from ...core.security import get_current_identity
from ...schemas.common import Envelope, MessageResponse
from ...schemas.playlist import PlaylistRead, PlaylistSongChange, PlaylistWithSongs, PlaylistWrite
from ...services.playlist_service import PlaylistService
from ..deps import ObjectId, get_playlist_service, get_settings

router = APIRouter()


@router.post("", response_model=Envelope[PlaylistRead])
async def create_playlist(
    body: PlaylistWrite,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[PlaylistRead]:
    playlist = await service.create_playlist(identity, body)
    return Envelope(data=playlist, message="Playlist created successfully")


@router.put("/edit/{playlist_id}", response_model=Envelope[PlaylistRead])
async def edit_playlist(
    playlist_id: ObjectId,
    body: PlaylistWrite,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[PlaylistRead]:
    """Overwrite name, description and image; omitted fields are cleared."""
    playlist = await service.edit_playlist(identity, playlist_id, body)
    return Envelope(data=playlist, message="Update successfully")


@router.put("/add-song", response_model=Envelope[PlaylistRead])
async def add_song(
    body: PlaylistSongChange,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[PlaylistRead]:
    playlist = await service.add_song(identity, body.playlist_id, body.song_id)
    return Envelope(data=playlist, message="Added to playlist")


@router.put("/remove-song", response_model=Envelope[PlaylistRead])
async def remove_song(
    body: PlaylistSongChange,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[PlaylistRead]:
    playlist = await service.remove_song(identity, body.playlist_id, body.song_id)
    return Envelope(data=playlist, message="Removed from playlist")


@router.get("/favourite", response_model=Envelope[List[PlaylistRead]])
async def favourite_playlists(
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[List[PlaylistRead]]:
    return Envelope(data=await service.list_favourite_playlists(identity.id))


@router.get("/random", response_model=Envelope[List[PlaylistRead]])
async def random_playlists(
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
    settings: Settings = Depends(get_settings),
) -> Envelope[List[PlaylistRead]]:
    return Envelope(data=await service.random_playlists(settings.random_playlist_size))


@router.get("/{playlist_id}", response_model=Envelope[PlaylistWithSongs])
async def get_playlist(
    playlist_id: ObjectId,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[PlaylistWithSongs]:
    return Envelope(data=await service.get_playlist_with_songs(playlist_id))


@router.get("", response_model=Envelope[List[PlaylistRead]])
async def list_playlists(
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> Envelope[List[PlaylistRead]]:
    return Envelope(data=await service.list_playlists())


@router.delete("/{playlist_id}", response_model=MessageResponse)
async def delete_playlist(
    playlist_id: ObjectId,
    identity: Identity = Depends(get_current_identity),
    service: PlaylistService = Depends(get_playlist_service),
) -> MessageResponse:
    await service.delete_playlist(identity, playlist_id)
    return MessageResponse(message="Removed from library")
