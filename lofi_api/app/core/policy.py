"""
Access policy for users, songs and playlists.

Every permission decision in the API goes through :func:`evaluate`,
which takes the caller's identity, the action being attempted and the
resource it targets, and returns a :class:`Decision`.  The function has
no I/O so it can be tested without HTTP or a database.  Services call
:func:`enforce`, which raises ``Forbidden`` when the decision denies.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..schemas.user import Role
from .exceptions import Forbidden

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as derived from a verified token."""

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class ResourceKind(str, Enum):
    USER = "user"
    SONG = "song"
    PLAYLIST = "playlist"


class Action(str, Enum):
    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIKE = "like"
    ADD_SONG = "add_song"
    REMOVE_SONG = "remove_song"
    CHANGE_ROLE = "change_role"


@dataclass(frozen=True)
class Resource:
    """Target of an action.

    ``owner_id`` is the owning user for playlists and the user itself
    for user resources; it is ``None`` for catalog songs and for
    collection-level actions.
    """

    kind: ResourceKind
    owner_id: Optional[str] = None

    @classmethod
    def playlist(cls, owner_id: str) -> "Resource":
        return cls(ResourceKind.PLAYLIST, owner_id)

    @classmethod
    def user(cls, user_id: Optional[str] = None) -> "Resource":
        return cls(ResourceKind.USER, user_id)

    @classmethod
    def song(cls) -> "Resource":
        return cls(ResourceKind.SONG)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _owner_only(identity: Identity, resource: Resource, noun: str) -> Decision:
    if resource.owner_id is not None and resource.owner_id == identity.id:
        return ALLOW
    return Decision(False, f"User don't have access to {noun}")


def evaluate(identity: Identity, action: Action, resource: Resource) -> Decision:
    """Decide whether ``identity`` may perform ``action`` on ``resource``."""
    if resource.kind == ResourceKind.PLAYLIST:
        if action in (Action.READ, Action.LIST, Action.CREATE):
            return ALLOW
        # Playlists are private to their owner; admins get no bypass.
        nouns = {
            Action.UPDATE: "edit",
            Action.ADD_SONG: "add",
            Action.REMOVE_SONG: "remove",
            Action.DELETE: "delete",
        }
        if action in nouns:
            return _owner_only(identity, resource, nouns[action])

    elif resource.kind == ResourceKind.SONG:
        if action in (Action.READ, Action.LIST, Action.LIKE):
            return ALLOW
        if action in (Action.CREATE, Action.UPDATE, Action.DELETE):
            if identity.is_admin:
                return ALLOW
            return Decision(False, "Admin access required")

    elif resource.kind == ResourceKind.USER:
        if action == Action.READ:
            return ALLOW
        if action in (Action.LIST, Action.CHANGE_ROLE):
            if identity.is_admin:
                return ALLOW
            return Decision(False, "Admin access required")
        if action in (Action.UPDATE, Action.DELETE):
            if identity.is_admin or resource.owner_id == identity.id:
                return ALLOW
            return Decision(False, "Insufficient permissions")

    return Decision(False, f"Action {action.value} is not permitted on {resource.kind.value}")


def enforce(identity: Identity, action: Action, resource: Resource) -> None:
    """Raise ``Forbidden`` unless the policy allows the action."""
    decision = evaluate(identity, action, resource)
    if not decision:
        logger.warning(
            "Denied %s on %s for user %s: %s",
            action.value,
            resource.kind.value,
            identity.id,
            decision.reason,
        )
        raise Forbidden(decision.reason)


def require_admin(identity: Identity) -> None:
    """Raise ``Forbidden`` unless the caller is an administrator."""
    if not identity.is_admin:
        raise Forbidden("Admin access required")
