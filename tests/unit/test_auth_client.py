from __future__ import annotations

import json

import httpx
import pytest

from muusmart.clients.http_client import create_http_client
from muusmart.core.exceptions import (
    AuthServiceUnavailableError,
    InvalidCredentialsError,
    RegistrationFailedError,
)
from muusmart.schemas.requests import LoginRequest, RegisterRequest
from muusmart.services.auth_client import AuthClient

CREDENTIALS = LoginRequest(username="bob", password="x")
REGISTRATION = RegisterRequest(username="bob", email="bob@example.com", password="x")


def _auth_client(settings, store, events, handler) -> tuple[AuthClient, httpx.AsyncClient]:
    http = create_http_client(settings, store, events, transport=httpx.MockTransport(handler))
    return AuthClient(client=http, settings=settings), http


class TestLogin:
    @pytest.mark.asyncio
    async def test_posts_credentials(self, settings, store, events):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"token": "a.b.c"})

        auth, http = _auth_client(settings, store, events, handler)
        async with http:
            resp = await auth.login(CREDENTIALS)

        assert resp.token == "a.b.c"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/auth/login"
        assert json.loads(seen[0].content) == {"username": "bob", "password": "x"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403, 422])
    async def test_rejected_credentials(self, settings, store, events, status):
        auth, http = _auth_client(
            settings, store, events, lambda r: httpx.Response(status, json={"error": "bad"})
        )
        async with http:
            with pytest.raises(InvalidCredentialsError):
                await auth.login(CREDENTIALS)

    @pytest.mark.asyncio
    async def test_server_error(self, settings, store, events):
        auth, http = _auth_client(settings, store, events, lambda r: httpx.Response(503))
        async with http:
            with pytest.raises(AuthServiceUnavailableError):
                await auth.login(CREDENTIALS)

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self, settings, store, events):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        auth, http = _auth_client(settings, store, events, handler)
        async with http:
            with pytest.raises(AuthServiceUnavailableError):
                await auth.login(CREDENTIALS)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_body_without_token(self, settings, store, events):
        auth, http = _auth_client(
            settings, store, events, lambda r: httpx.Response(200, json={"ok": True})
        )
        async with http:
            with pytest.raises(AuthServiceUnavailableError):
                await auth.login(CREDENTIALS)


class TestRegister:
    @pytest.mark.asyncio
    async def test_posts_payload(self, settings, store, events):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"token": "a.b.c"})

        auth, http = _auth_client(settings, store, events, handler)
        async with http:
            resp = await auth.register(REGISTRATION)

        assert resp.token == "a.b.c"
        assert seen[0].url.path == "/auth/register"
        assert json.loads(seen[0].content) == {
            "username": "bob",
            "email": "bob@example.com",
            "password": "x",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 409, 500])
    async def test_rejected(self, settings, store, events, status):
        auth, http = _auth_client(
            settings, store, events, lambda r: httpx.Response(status, text="username taken")
        )
        async with http:
            with pytest.raises(RegistrationFailedError) as exc_info:
                await auth.register(REGISTRATION)
        assert f"status={status}" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_transport_error(self, settings, store, events):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        auth, http = _auth_client(settings, store, events, handler)
        async with http:
            with pytest.raises(RegistrationFailedError):
                await auth.register(REGISTRATION)

    @pytest.mark.asyncio
    async def test_body_not_json(self, settings, store, events):
        auth, http = _auth_client(
            settings, store, events, lambda r: httpx.Response(200, text="<html>")
        )
        async with http:
            with pytest.raises(RegistrationFailedError):
                await auth.register(REGISTRATION)
