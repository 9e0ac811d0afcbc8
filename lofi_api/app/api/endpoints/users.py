"""
User endpoints.

Registration is open; listing users is reserved to administrators.
Users may read any profile and update or delete their own account;
administrators may update or delete anyone and change roles.
"""

from typing import List

from fastapi import APIRouter, Depends

from ...core.policy import Action, Identity, Resource, enforce
from ...core.security import get_current_identity
from ...schemas.common import Envelope, MessageResponse
from ...schemas.user import UserCreate, UserRead, UserUpdate
from ...services.user_service import UserService
from ..deps import ObjectId, get_user_service

router = APIRouter()


@router.post("", response_model=Envelope[UserRead])
async def register_user(
    user: UserCreate,
    service: UserService = Depends(get_user_service),
) -> Envelope[UserRead]:
    """Register a new account.

    Returns 403 if the e‑mail is already registered.
    """
    created = await service.create_user(user)
    return Envelope(data=created, message="Account created successfully")


@router.get("", response_model=Envelope[List[UserRead]])
async def list_users(
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> Envelope[List[UserRead]]:
    """List every account (admin only)."""
    enforce(identity, Action.LIST, Resource.user())
    return Envelope(data=await service.list_users())


@router.get("/{user_id}", response_model=Envelope[UserRead])
async def get_user(
    user_id: ObjectId,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> Envelope[UserRead]:
    return Envelope(data=await service.get_user(user_id))


@router.put("/{user_id}", response_model=Envelope[UserRead])
async def update_user(
    user_id: ObjectId,
    body: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> Envelope[UserRead]:
    """Update a profile.

    The body may contain ``name``, ``email``, ``password``, ``gender``,
    ``date_of_birth`` and, for administrators only, ``role``.
    """
    updated = await service.update_user(identity, user_id, body)
    return Envelope(data=updated, message="Profile updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: ObjectId,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    await service.delete_user(identity, user_id)
    return MessageResponse(message="Successfully deleted user")
