"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below and the handlers registered in ``main.create_app``
turn them into ``{"message": ...}`` bodies with the status code carried
by the exception class.
"""

from typing import Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(ServiceError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(ServiceError):
    """Missing or invalid credential token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(ServiceError):
    """Authenticated, but lacking the role or ownership required."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFound(ServiceError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ServiceError):
    """A unique field is already taken.

    Reported as 403 rather than 409 to stay compatible with existing
    clients of the registration endpoint.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Already exists"
