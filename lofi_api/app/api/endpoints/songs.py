"""
Song catalog endpoints.

The catalog listing is public.  Creating, updating and deleting songs
requires an administrator token; liking a song and listing liked songs
require any authenticated user.

``/like`` routes are declared before ``/{song_id}`` so they are not
shadowed by the id route.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from ...core.exceptions import NotFound, ValidationError
from ...core.policy import Identity
from ...core.security import get_admin_identity, get_current_identity
from ...schemas.common import Envelope, MessageResponse
from ...schemas.song import LikeChange, SongCreate, SongRead, SongUpdate
from ...services.song_service import SongService
from ..deps import ObjectId, get_song_service

router = APIRouter()

LIKE_MESSAGES = {
    LikeChange.ADDED: "Added to your liked songs",
    LikeChange.REMOVED: "Removed from your liked songs",
}


@router.post("", response_model=Envelope[SongRead])
async def create_song(
    song: SongCreate,
    identity: Identity = Depends(get_admin_identity),
    service: SongService = Depends(get_song_service),
) -> Envelope[SongRead]:
    created = await service.create_song(identity, song)
    return Envelope(data=created, message="Song created successfully")


@router.get("", response_model=Envelope[List[SongRead]])
async def list_songs(service: SongService = Depends(get_song_service)) -> Envelope[List[SongRead]]:
    return Envelope(data=await service.list_songs())


@router.get("/like", response_model=Envelope[List[SongRead]])
async def list_liked_songs(
    identity: Identity = Depends(get_current_identity),
    service: SongService = Depends(get_song_service),
) -> Envelope[List[SongRead]]:
    return Envelope(data=await service.list_liked_songs(identity.id))


@router.put(
    "/like/{song_id}",
    response_model=MessageResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": MessageResponse}},
)
async def toggle_like(
    song_id: ObjectId,
    identity: Identity = Depends(get_current_identity),
    service: SongService = Depends(get_song_service),
) -> MessageResponse:
    """Like the song, or unlike it if it is already liked."""
    try:
        change = await service.toggle_like(identity, song_id)
    except NotFound as exc:
        # Existing clients expect 400 for an unknown song here.
        raise ValidationError(exc.message) from exc
    return MessageResponse(message=LIKE_MESSAGES[change])


@router.get("/{song_id}", response_model=Envelope[SongRead])
async def get_song(
    song_id: ObjectId,
    service: SongService = Depends(get_song_service),
) -> Envelope[SongRead]:
    song = await service.get_song(song_id)
    if song is None:
        raise NotFound("Song not found")
    return Envelope(data=song)


@router.put("/{song_id}", response_model=Envelope[SongRead])
async def update_song(
    song_id: ObjectId,
    song: SongUpdate,
    identity: Identity = Depends(get_admin_identity),
    service: SongService = Depends(get_song_service),
) -> Envelope[SongRead]:
    updated = await service.update_song(identity, song_id, song)
    return Envelope(data=updated, message="Song updated successfully")


@router.delete("/{song_id}", response_model=MessageResponse)
async def delete_song(
    song_id: ObjectId,
    identity: Identity = Depends(get_admin_identity),
    service: SongService = Depends(get_song_service),
) -> MessageResponse:
    await service.delete_song(identity, song_id)
    return MessageResponse(message="Song deleted successfully")
