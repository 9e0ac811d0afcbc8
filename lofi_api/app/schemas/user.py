"""
Pydantic models for user data.

Defines schemas for registering users, logging in, updating profiles
and reading user information.  Password hashes are never part of a
response model.
"""

from datetime import date
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

Gender = Literal["male", "female", "non-binary"]


class Role(str, Enum):
    """Role attached to every account and carried in access tokens."""

    REGULAR = "regular"
    ADMIN = "admin"


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=64, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    gender: Optional[Gender] = Field(None, examples=["female"])
    date_of_birth: Optional[date] = Field(None, examples=["1998-04-12"])

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.lower()


class UserCreate(UserBase):
    """Schema for registering a user.

    The role is never taken from the request; it is derived from the
    ``ADMIN_EMAILS`` setting by the user service.
    """

    password: str = Field(..., min_length=8, max_length=128, examples=["strongpassword"])


class UserUpdate(BaseModel):
    """Schema for updating a user.

    All fields are optional; only provided values are changed.
    ``role`` may only be set by an administrator.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=64)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else None


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: str
    role: Role = Role.REGULAR
    liked_songs: List[str] = Field(default_factory=list)
    playlists: List[str] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.lower()
