import pytest
from fastapi.testclient import TestClient

from lofi_api.app.core.config import Settings
from lofi_api.app.core.db import Database
from lofi_api.app.core.policy import Identity
from lofi_api.app.main import create_app
from lofi_api.app.schemas.playlist import PlaylistWrite
from lofi_api.app.schemas.song import SongCreate
from lofi_api.app.schemas.user import UserCreate
from lofi_api.app.services.playlist_service import PlaylistService
from lofi_api.app.services.search_service import SearchService
from lofi_api.app.services.song_service import SongService
from lofi_api.app.services.user_service import UserService

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "password123"


@pytest.fixture
def settings():
    return Settings(database_url=":memory:", secret_key="test-secret", admin_emails=ADMIN_EMAIL)


@pytest.fixture
def db():
    database = Database(":memory:").open()
    yield database
    database.close()


@pytest.fixture
def user_service(db, settings):
    return UserService(db, settings)


@pytest.fixture
def song_service(db):
    return SongService(db)


@pytest.fixture
def playlist_service(db):
    return PlaylistService(db)


@pytest.fixture
def search_service(db):
    return SearchService(db, limit=10)


async def _register(user_service, name, email):
    user = await user_service.create_user(UserCreate(name=name, email=email, password=PASSWORD))
    return Identity(id=user.id, role=user.role)


@pytest.fixture
async def admin(user_service):
    return await _register(user_service, "Admin", ADMIN_EMAIL)


@pytest.fixture
async def alice(user_service):
    return await _register(user_service, "Alice", "alice@example.com")


@pytest.fixture
async def bob(user_service):
    return await _register(user_service, "Bob", "bob@example.com")


@pytest.fixture
def make_song(song_service, admin):
    async def make(title="Lofi Dreams", artist="Chill Crew", duration_seconds=180):
        return await song_service.create_song(
            admin,
            SongCreate(title=title, artist=artist, duration_seconds=duration_seconds),
        )

    return make


@pytest.fixture
def make_playlist(playlist_service):
    async def make(owner, name="Late night study", **fields):
        return await playlist_service.create_playlist(owner, PlaylistWrite(name=name, **fields))

    return make


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Register and log in a user over HTTP; returns ``(user, headers)``."""

    def _signup(name="Alice", email="alice@example.com", password=PASSWORD):
        response = client.post("/api/users", json={"name": name, "email": email, "password": password})
        assert response.status_code == 200, response.text
        user = response.json()["data"]
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["data"]
        return user, {"Authorization": f"Bearer {token}"}

    return _signup
