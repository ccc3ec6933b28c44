import pytest

from nexus_tcg.app import create_app
from nexus_tcg.content.catalog import load_catalog
from nexus_tcg.storage.creation import create_tables, make_engine


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def app():
    return create_app(
        {
            "TESTING": True,
            "ROOM_STORE": "memory",
            "DECK_STORE": "memory",
            "CONFLICT_BACKOFF": 0,
        },
        with_socketio=False,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def call(client):
    def _call(action, user_id=None, name=None, **fields):
        body = {"action": action, **fields}
        if user_id:
            body["user"] = {"userId": user_id, "name": name or user_id}
        return client.post("/api/game", json=body)
    return _call
