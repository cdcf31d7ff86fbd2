import pytest
from fastapi.testclient import TestClient

from users_api.main import create_app
from users_api.models import User
from users_api.store import UserStore

# In-memory SQLite database shared across connections via StaticPool.
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture()
def store():
    """Provide a fresh, empty store for each test.

    Every call builds a new in-memory engine, so tests never see each
    other's rows.
    """
    store = UserStore.connect(TEST_DATABASE_URL)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def app(store):
    return create_app(store)


@pytest.fixture()
def client(app):
    """TestClient that also runs the startup/shutdown lifespan."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_factory(store):
    """Factory fixture that creates users directly through the store.

    Useful when a test needs pre-existing data without going through the
    HTTP API.
    """

    def _create_user(name: str, email: str) -> User:
        return store.insert(name, email)

    return _create_user
