"""
Pydantic schema definitions for API payloads.

Each domain (users, songs, playlists, search) defines its own models
for request and response bodies.  Schemas are separated from the
storage rows so the API representation can evolve independently.
"""
