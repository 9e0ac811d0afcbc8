"""
Endpoint modules.

Each module defines an ``APIRouter`` for one domain (users, login,
songs, playlists, search).  The routers are aggregated in
``api/router.py``.
"""
