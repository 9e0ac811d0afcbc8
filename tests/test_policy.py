import pytest

from lofi_api.app.core.exceptions import Forbidden
from lofi_api.app.core.policy import Action, Identity, Resource, enforce, evaluate, require_admin
from lofi_api.app.schemas.user import Role

OWNER = Identity(id="a" * 32, role=Role.REGULAR)
STRANGER = Identity(id="b" * 32, role=Role.REGULAR)
ADMIN = Identity(id="c" * 32, role=Role.ADMIN)


@pytest.mark.parametrize(
    "action", [Action.UPDATE, Action.ADD_SONG, Action.REMOVE_SONG, Action.DELETE]
)
def test_playlist_mutations_are_owner_only(action):
    playlist = Resource.playlist(OWNER.id)

    assert evaluate(OWNER, action, playlist).allowed
    assert not evaluate(STRANGER, action, playlist).allowed
    # Administrators do not get to edit other people's playlists either.
    assert not evaluate(ADMIN, action, playlist).allowed


def test_anyone_reads_and_creates_playlists():
    playlist = Resource.playlist(OWNER.id)
    assert evaluate(STRANGER, Action.READ, playlist)
    assert evaluate(STRANGER, Action.CREATE, Resource.playlist(STRANGER.id))


@pytest.mark.parametrize("action", [Action.CREATE, Action.UPDATE, Action.DELETE])
def test_catalog_changes_require_admin(action):
    assert evaluate(ADMIN, action, Resource.song())
    decision = evaluate(OWNER, action, Resource.song())
    assert not decision
    assert decision.reason == "Admin access required"


def test_any_user_can_like_songs():
    assert evaluate(OWNER, Action.LIKE, Resource.song())


def test_user_updates_self_or_admin():
    target = Resource.user(OWNER.id)
    assert evaluate(OWNER, Action.UPDATE, target)
    assert evaluate(ADMIN, Action.UPDATE, target)
    assert not evaluate(STRANGER, Action.UPDATE, target)
    assert evaluate(ADMIN, Action.DELETE, target)
    assert not evaluate(STRANGER, Action.DELETE, target)


def test_listing_users_and_changing_roles_is_admin_only():
    assert evaluate(ADMIN, Action.LIST, Resource.user())
    assert not evaluate(OWNER, Action.LIST, Resource.user())
    assert not evaluate(OWNER, Action.CHANGE_ROLE, Resource.user(OWNER.id))


def test_unknown_combination_is_denied():
    assert not evaluate(ADMIN, Action.LIKE, Resource.playlist(ADMIN.id))


def test_enforce_raises_forbidden_with_reason():
    with pytest.raises(Forbidden) as excinfo:
        enforce(STRANGER, Action.UPDATE, Resource.playlist(OWNER.id))
    assert excinfo.value.message == "User don't have access to edit"
    assert excinfo.value.status_code == 403


def test_require_admin():
    require_admin(ADMIN)
    with pytest.raises(Forbidden):
        require_admin(OWNER)
