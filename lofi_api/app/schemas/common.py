"""
Response envelopes shared by all endpoints.

Successful responses wrap their payload as ``{"data": ..., "message":
...}``; errors only carry ``{"message": ...}``.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# Opaque identifiers are UUID4 hex strings.
ID_PATTERN = r"^[0-9a-f]{32}$"


class Envelope(BaseModel, Generic[T]):
    """Successful response carrying a payload."""

    data: T
    message: Optional[str] = None


class MessageResponse(BaseModel):
    """Response carrying only a human readable message."""

    message: str
