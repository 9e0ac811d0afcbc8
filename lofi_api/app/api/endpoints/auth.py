"""
Login endpoint.

Exchanges an e‑mail and password for a bearer token.  Wrong
credentials are reported with 400 and a message that does not reveal
whether the account exists.
"""

from fastapi import APIRouter, Depends

from ...schemas.common import Envelope
from ...schemas.user import LoginRequest
from ...services.user_service import UserService
from ..deps import get_user_service

router = APIRouter()


@router.post("", response_model=Envelope[str])
async def login(
    credentials: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> Envelope[str]:
    token = await service.authenticate(credentials.email, credentials.password)
    return Envelope(data=token, message="Signing in please wait...")
