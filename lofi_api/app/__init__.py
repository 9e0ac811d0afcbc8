"""
Application package initializer.

The API is split into a ``core`` layer (configuration, logging,
security, storage), a ``services`` layer holding the business rules
for users, songs, playlists and search, Pydantic ``schemas`` for
request and response bodies, and the ``api`` routers that expose the
services over HTTP.
"""

from .main import app, create_app  # noqa: F401
