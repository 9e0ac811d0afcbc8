"""
Business logic for user accounts.

Covers registration, login, profile updates and deletion.  Passwords
are stored as PBKDF2 hashes (see ``core.security``) and never leave
this module.  A user's liked songs and playlists live in link tables;
:meth:`UserService._load_user` gathers them into ``UserRead``.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.config import Settings
from ..core.db import Database, new_id
from ..core.exceptions import Conflict, NotFound, ValidationError
from ..core.policy import Action, Identity, Resource, enforce
from ..core.security import hash_password, issue_token, verify_password
from ..schemas.user import Role, UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with given email already exists!"
INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """Service for managing user accounts."""

    def __init__(self, db: Database, settings: Settings) -> None:
        self._db = db
        self._settings = settings

    async def create_user(self, data: UserCreate) -> UserRead:
        """Register a new user.

        Raises ``Conflict`` if the e‑mail is already registered.  Users
        whose e‑mail appears in ``ADMIN_EMAILS`` are created as admins.
        """
        email = data.email.lower()
        role = Role.ADMIN if email in self._settings.admin_email_list else Role.REGULAR
        user_id = new_id()
        with self._db.cursor() as cursor:
            existing = cursor.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
            if existing:
                raise Conflict(EMAIL_TAKEN)
            try:
                cursor.execute(
                    "INSERT INTO users (id, name, email, password_hash, role, gender, date_of_birth) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        user_id,
                        data.name,
                        email,
                        hash_password(data.password),
                        role.value,
                        data.gender,
                        data.date_of_birth.isoformat() if data.date_of_birth else None,
                    ),
                )
            except sqlite3.IntegrityError:
                raise Conflict(EMAIL_TAKEN)
            user = self._load_user(cursor, user_id)
        logger.info("Registered user %s (%s) as %s", user_id, email, role.value)
        return user

    async def authenticate(self, email: str, password: str) -> str:
        """Check credentials and return a fresh access token.

        Unknown e‑mails and wrong passwords fail with the same
        ``ValidationError`` so callers cannot probe for accounts.
        """
        with self._db.cursor() as cursor:
            row = cursor.execute(
                "SELECT id, role, password_hash FROM users WHERE email = ?",
                (email.lower(),),
            ).fetchone()
        if not row or not verify_password(password, row["password_hash"]):
            logger.info("Failed login for %s", email)
            raise ValidationError(INVALID_CREDENTIALS)
        return issue_token(
            row["id"],
            Role(row["role"]),
            secret_key=self._settings.secret_key,
            expires_delta=self._settings.access_token_expire_minutes * 60,
        )

    async def list_users(self) -> List[UserRead]:
        with self._db.cursor() as cursor:
            rows = cursor.execute("SELECT id FROM users ORDER BY rowid").fetchall()
            return [self._load_user(cursor, row["id"]) for row in rows]

    async def get_user(self, user_id: str) -> UserRead:
        with self._db.cursor() as cursor:
            user = self._load_user(cursor, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def update_user(self, identity: Identity, user_id: str, data: UserUpdate) -> UserRead:
        """Update a user's profile, password or role.

        Users may update themselves; admins may update anyone and are
        the only ones allowed to change a role.
        """
        enforce(identity, Action.UPDATE, Resource.user(user_id))
        updates = data.model_dump(exclude_unset=True)
        if updates.get("role") is not None:
            enforce(identity, Action.CHANGE_ROLE, Resource.user(user_id))
        with self._db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone():
                raise NotFound("User not found")
            fields = []
            values = []
            for key, value in updates.items():
                if value is None and key in ("name", "email", "password", "role"):
                    continue
                if key == "email":
                    taken = cursor.execute(
                        "SELECT id FROM users WHERE email = ? AND id != ?",
                        (value, user_id),
                    ).fetchone()
                    if taken:
                        raise Conflict(EMAIL_TAKEN)
                elif key == "password":
                    key, value = "password_hash", hash_password(value)
                elif key == "role":
                    value = value.value
                elif key == "date_of_birth" and value is not None:
                    value = value.isoformat()
                fields.append(f"{key} = ?")
                values.append(value)
            if fields:
                values.append(user_id)
                cursor.execute(
                    f"UPDATE users SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    tuple(values),
                )
                logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(updates)))
            return self._load_user(cursor, user_id)

    async def delete_user(self, identity: Identity, user_id: str) -> None:
        """Delete a user and their like and playlist links.

        Playlists the user owned stay in the store; their ``owner_id``
        becomes a dangling reference.
        """
        enforce(identity, Action.DELETE, Resource.user(user_id))
        with self._db.cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
            if cursor.rowcount == 0:
                raise NotFound("User not found")
            cursor.execute("DELETE FROM user_liked_songs WHERE user_id = ?", (user_id,))
            cursor.execute("DELETE FROM user_playlists WHERE user_id = ?", (user_id,))
        logger.info("Deleted user %s (by %s)", user_id, identity.id)

    async def set_role(self, email: str, role: Role) -> UserRead:
        """Assign ``role`` to the user registered with ``email``."""
        with self._db.cursor() as cursor:
            row = cursor.execute("SELECT id FROM users WHERE email = ?", (email.lower(),)).fetchone()
            if not row:
                raise NotFound(f"No user found with email: {email}")
            cursor.execute(
                "UPDATE users SET role = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (role.value, row["id"]),
            )
            user = self._load_user(cursor, row["id"])
        logger.info("Set role of %s to %s", email, role.value)
        return user

    async def reset_password(self, email: str, password: str) -> None:
        if len(password) < 8:
            raise ValidationError("Password must be at least 8 characters")
        with self._db.cursor() as cursor:
            cursor.execute(
                "UPDATE users SET password_hash = ?, updated_at = CURRENT_TIMESTAMP WHERE email = ?",
                (hash_password(password), email.lower()),
            )
            if cursor.rowcount == 0:
                raise NotFound(f"No user found with email: {email}")
        logger.info("Password reset for %s", email)

    @staticmethod
    def _load_user(cursor: sqlite3.Cursor, user_id: str) -> Optional[UserRead]:
        row = cursor.execute(
            "SELECT id, name, email, role, gender, date_of_birth FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
        if not row:
            return None
        liked = cursor.execute(
            "SELECT song_id FROM user_liked_songs WHERE user_id = ? ORDER BY liked_at, rowid",
            (user_id,),
        ).fetchall()
        playlists = cursor.execute(
            "SELECT playlist_id FROM user_playlists WHERE user_id = ? ORDER BY position",
            (user_id,),
        ).fetchall()
        return UserRead(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=Role(row["role"]),
            gender=row["gender"],
            date_of_birth=row["date_of_birth"],
            liked_songs=[r["song_id"] for r in liked],
            playlists=[r["playlist_id"] for r in playlists],
        )
