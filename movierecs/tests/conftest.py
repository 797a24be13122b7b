# movierecs/tests/conftest.py
import httpx
import pytest
import respx

from movierecs.core.settings import Settings
from movierecs.db.store import FavoritesStore
from movierecs.integrations.tmdb import TMDBClient
from movierecs.main import create_app

TMDB_BASE = "https://api.themoviedb.org/3"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        TMDB_API_KEY="test-key",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'favorites.db'}",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
async def store(settings):
    """A FavoritesStore on a throwaway SQLite file with the schema created."""
    s = FavoritesStore.from_url(settings.async_database_url)
    await s.create_schema()
    try:
        yield s
    finally:
        await s.dispose()


@pytest.fixture
async def tmdb(settings):
    client = TMDBClient.from_settings(settings)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def tmdb_mock():
    """Stub TMDb; nothing leaves the process."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def app(settings, store, tmdb):
    # ASGITransport does not run the lifespan, so wire app.state by hand
    application = create_app(settings)
    application.state.store = store
    application.state.tmdb = tmdb
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
