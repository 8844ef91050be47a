from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from chessroom.config import Settings
from chessroom.server import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(send_timeout=1.0)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """One app (one game) per test; entering the client shares one event loop across sockets."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
