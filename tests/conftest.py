from __future__ import annotations

from unittest.mock import AsyncMock

import jwt
import pytest
from fastapi.testclient import TestClient

from muusmart.clients.navigator import Navigator
from muusmart.clients.token_store import MemoryTokenStore
from muusmart.config import Settings
from muusmart.core.signals import SessionEvents
from muusmart.main import create_app
from muusmart.services.session_manager import SessionManager

NOW = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _encode_token(exp: float | None, sub: str | None = "bob", **claims) -> str:
    payload = dict(claims)
    if sub is not None:
        payload["sub"] = sub
    if exp is not None:
        payload["exp"] = int(exp)
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        API_GATEWAY_URL="http://gateway.test",
        TOKEN_STORE_PATH="",
        MAX_RETRIES=3,
        BACKOFF_FACTOR=0,
        VERIFY_SSL=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def events() -> SessionEvents:
    return SessionEvents()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def auth_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def manager(store, auth_client, navigator, events, clock) -> SessionManager:
    return SessionManager(
        store=store,
        auth_client=auth_client,
        navigator=navigator,
        events=events,
        check_interval=0.01,
        clock=clock,
    )


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_token():
    """Signed HS256 token factory; pass exp=None for a token without expiry."""
    return _encode_token
