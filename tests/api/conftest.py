import pytest
from fastapi.testclient import TestClient

from quizhub.main import create_app
from quizhub.settings import Settings
from tests.fakes import FakeConnection


@pytest.fixture()
def connection():
    return FakeConnection(ready=True)


@pytest.fixture()
def app(connection):
    return create_app(
        settings=Settings(log_level="WARNING"),
        connection_factory=lambda settings: connection,
    )


@pytest.fixture()
def client(app):
    # entering the client runs the lifespan (startup/shutdown)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
