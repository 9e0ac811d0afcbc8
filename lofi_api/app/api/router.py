"""
Top‑level API router.

Aggregates the domain routers under a unified prefix.  When new
endpoints or domains are added, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import auth, playlists, search, songs, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(auth.router, prefix="/login", tags=["auth"])
router.include_router(songs.router, prefix="/songs", tags=["songs"])
router.include_router(playlists.router, prefix="/playlists", tags=["playlists"])
# The search router defines its own "/search" path.
router.include_router(search.router, tags=["search"])
