import pytest

from lofi_api.app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from lofi_api.app.core.policy import Identity
from lofi_api.app.core.security import authenticate
from lofi_api.app.schemas.user import Role, UserCreate, UserUpdate

from .conftest import ADMIN_EMAIL, PASSWORD


async def test_registration_defaults_to_regular_role(user_service):
    user = await user_service.create_user(
        UserCreate(name="Jane", email="Jane@Example.com", password=PASSWORD, gender="female")
    )
    assert user.role == Role.REGULAR
    assert user.email == "jane@example.com"
    assert user.liked_songs == []
    assert user.playlists == []


async def test_configured_admin_emails_register_as_admin(user_service):
    user = await user_service.create_user(UserCreate(name="Root", email=ADMIN_EMAIL, password=PASSWORD))
    assert user.role == Role.ADMIN


async def test_duplicate_email_conflicts_without_creating_a_record(user_service, alice):
    with pytest.raises(Conflict):
        await user_service.create_user(
            UserCreate(name="Imposter", email="ALICE@example.com", password=PASSWORD)
        )
    users = await user_service.list_users()
    assert [u.email for u in users] == ["alice@example.com"]


async def test_authenticate_returns_token_for_valid_credentials(user_service, settings, alice):
    token = await user_service.authenticate("alice@example.com", PASSWORD)
    identity = authenticate(token, settings.secret_key)
    assert identity == alice


@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "wrong-password"),
    ("nobody@example.com", PASSWORD),
])
async def test_authenticate_fails_the_same_way(user_service, alice, email, password):
    with pytest.raises(ValidationError) as excinfo:
        await user_service.authenticate(email, password)
    assert excinfo.value.message == "Invalid email or password"


async def test_get_unknown_user_is_not_found(user_service):
    with pytest.raises(NotFound):
        await user_service.get_user("f" * 32)


async def test_user_updates_own_profile(user_service, alice):
    updated = await user_service.update_user(alice, alice.id, UserUpdate(name="Alice B", password="new-password"))
    assert updated.name == "Alice B"
    await user_service.authenticate("alice@example.com", "new-password")


async def test_user_cannot_update_someone_else(user_service, alice, bob):
    with pytest.raises(Forbidden):
        await user_service.update_user(alice, bob.id, UserUpdate(name="Hacked"))


async def test_only_admins_change_roles(user_service, admin, alice):
    with pytest.raises(Forbidden):
        await user_service.update_user(alice, alice.id, UserUpdate(role=Role.ADMIN))

    promoted = await user_service.update_user(admin, alice.id, UserUpdate(role=Role.ADMIN))
    assert promoted.role == Role.ADMIN


async def test_explicit_null_role_is_ignored_for_regular_users(user_service, alice):
    updated = await user_service.update_user(alice, alice.id, UserUpdate(name="Alice B", role=None))
    assert updated.name == "Alice B"
    assert updated.role == Role.REGULAR


async def test_email_change_must_stay_unique(user_service, alice, bob):
    with pytest.raises(Conflict):
        await user_service.update_user(alice, alice.id, UserUpdate(email="bob@example.com"))


async def test_delete_removes_user_and_links(user_service, db, make_song, song_service, make_playlist, alice):
    song = await make_song()
    await song_service.toggle_like(alice, song.id)
    playlist = await make_playlist(alice)

    await user_service.delete_user(alice, alice.id)

    with pytest.raises(NotFound):
        await user_service.get_user(alice.id)
    with db.cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) AS n FROM user_liked_songs").fetchone()["n"] == 0
        assert cursor.execute("SELECT COUNT(*) AS n FROM user_playlists").fetchone()["n"] == 0
        # The playlist itself stays, pointing at a user that no longer exists.
        row = cursor.execute("SELECT owner_id FROM playlists WHERE id = ?", (playlist.id,)).fetchone()
    assert row["owner_id"] == alice.id


async def test_delete_other_user_requires_admin(user_service, admin, alice, bob):
    with pytest.raises(Forbidden):
        await user_service.delete_user(alice, bob.id)
    await user_service.delete_user(admin, bob.id)
    with pytest.raises(NotFound):
        await user_service.delete_user(admin, bob.id)


async def test_set_role_and_reset_password(user_service, alice):
    user = await user_service.set_role("alice@example.com", Role.ADMIN)
    assert user.role == Role.ADMIN

    await user_service.reset_password("alice@example.com", "brand-new-pass")
    await user_service.authenticate("alice@example.com", "brand-new-pass")

    with pytest.raises(NotFound):
        await user_service.set_role("ghost@example.com", Role.ADMIN)
    with pytest.raises(ValidationError):
        await user_service.reset_password("alice@example.com", "short")


async def test_identity_fixture_matches_stored_role(user_service, admin):
    user = await user_service.get_user(admin.id)
    assert Identity(user.id, user.role) == admin
