"""
Search endpoint.

``GET /api/search?search=<text>`` looks the text up in song titles and
playlist names.  A missing or empty ``search`` parameter returns empty
lists.
"""

from fastapi import APIRouter, Depends, Query

from ...core.policy import Identity
from ...core.security import get_current_identity
from ...schemas.common import Envelope
from ...schemas.search import SearchResult
from ...services.search_service import SearchService
from ..deps import get_search_service

router = APIRouter()


@router.get("/search", response_model=Envelope[SearchResult])
async def search(
    search: str = Query("", max_length=100),
    identity: Identity = Depends(get_current_identity),
    service: SearchService = Depends(get_search_service),
) -> Envelope[SearchResult]:
    return Envelope(data=await service.search(search, identity))
