"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens carry the
user id in ``sub``, the user's role and an expiration timestamp
(``exp``).  Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random
salt.

The FastAPI dependencies at the bottom of the module turn the
``Authorization: Bearer <token>`` header into an :class:`Identity`.
Every verification failure (malformed token, bad signature, expired,
unknown role) is reported to the caller in the same way.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..schemas.user import Role
from .config import settings
from .exceptions import Unauthenticated
from .policy import Identity, require_admin

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[int] = None,
    secret_key: Optional[str] = None,
) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with an ``exp`` field representing the
    expiration time as a UNIX timestamp.  The token is a string of the
    form ``header.payload.signature``, where each part is base64url
    encoded.

    Parameters
    ----------
    data : dict
        Claims to embed in the token, e.g. ``{"sub": user_id, "role": "regular"}``.
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.
    secret_key : Optional[str]
        Signing key.  Defaults to ``settings.secret_key``.
    """
    to_encode = data.copy()
    exp_seconds = settings.access_token_expire_minutes * 60 if expires_delta is None else expires_delta
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature = _sign(signing_input, secret_key or settings.secret_key)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(signature)}"


def decode_access_token(token: str, secret_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Returns the payload dictionary if the signature matches and the
    token has not expired, otherwise ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, secret_key or settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        # Constant‑time comparison to prevent timing attacks
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict):
            return None
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
    except (ValueError, TypeError):
        # binascii.Error, JSONDecodeError and UnicodeDecodeError are all ValueErrors.
        return None
    return data


def issue_token(user_id: str, role: Role, secret_key: Optional[str] = None,
                expires_delta: Optional[int] = None) -> str:
    """Issue an access token for a user."""
    return create_access_token(
        {"sub": user_id, "role": role.value},
        expires_delta=expires_delta,
        secret_key=secret_key,
    )


def authenticate(token: str, secret_key: Optional[str] = None) -> Identity:
    """Resolve a bearer token to the caller's identity.

    Raises ``Unauthenticated`` for any token that does not verify; the
    cause is not reported.
    """
    payload = decode_access_token(token, secret_key)
    if not payload:
        raise Unauthenticated()
    user_id = payload.get("sub")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthenticated()
    if not isinstance(user_id, str) or not user_id:
        raise Unauthenticated()
    return Identity(id=user_id, role=role)


security = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Dependency that retrieves the calling identity.

    Raises 401 if the request has no ``Authorization`` header or the
    token does not verify.  The identity is also stored on
    ``request.state.identity`` for the rest of the request.
    """
    if credentials is None:
        raise Unauthenticated("Not authenticated")
    app_settings = getattr(request.app.state, "settings", settings)
    identity = authenticate(credentials.credentials, app_settings.secret_key)
    request.state.identity = identity
    return identity


def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Dependency that only lets administrators through (403 otherwise)."""
    require_admin(identity)
    return identity


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The
    resulting string contains the salt and hash in hex, separated by
    ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored salt+hash string."""
    try:
        salt_hex, hash_hex = hashed_password.split('$', 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except (AttributeError, ValueError):
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
