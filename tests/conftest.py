import asyncio

import pytest
from fastapi.testclient import TestClient

from taskboard.core.config import Settings
from taskboard.core.database import init_db, make_engine
from taskboard.crud import boards as crud
from taskboard.main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(db_url=f"sqlite:///{tmp_path / 'taskboard.db'}", jwt_secret=TEST_SECRET)


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(settings, engine):
    with TestClient(create_app(settings, engine)) as c:
        yield c


@pytest.fixture
def board(engine) -> dict:
    return asyncio.run(crud.create_board(engine, "Sprint 1"))


def register(client, username: str, password: str):
    return client.post("/register", json={"username": username, "password": password})


def login(client, username: str, password: str):
    return client.post("/login", json={"username": username, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_token(client) -> str:
    resp = register(client, "alice", "secret123")
    assert resp.status_code == 201, resp.text
    client.cookies.clear()
    return resp.json()["token"]
