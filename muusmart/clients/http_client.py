from __future__ import annotations

import httpx

from muusmart.clients.token_store import TokenStore
from muusmart.config import Settings
from muusmart.core.logging import get_logger
from muusmart.core.signals import SessionEvents, UnauthorizedEvent

logger = get_logger(__name__)

UNAUTHORIZED_MESSAGE = "Session expired or unauthorized"


def build_auth_hooks(
    settings: Settings, store: TokenStore, events: SessionEvents
) -> dict[str, list]:
    """Request hook attaches the bearer token; response hook raises the unauthorized signal."""
    key = settings.TOKEN_STORAGE_KEY
    statuses = frozenset(settings.UNAUTHORIZED_STATUSES)

    async def attach_bearer(request: httpx.Request) -> None:
        token = store.get(key)
        if token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {token}"

    async def detect_unauthorized(response: httpx.Response) -> None:
        if response.status_code not in statuses:
            return
        # Anonymous requests (e.g. a failed login) must not end a session
        if not store.get(key):
            return
        logger.warning(
            "unauthorized_response",
            status=response.status_code,
            url=str(response.request.url),
        )
        events.unauthorized.emit(
            UnauthorizedEvent(
                status=response.status_code,
                message=UNAUTHORIZED_MESSAGE,
                url=str(response.request.url),
            )
        )

    return {"request": [attach_bearer], "response": [detect_unauthorized]}


def create_http_client(
    settings: Settings,
    store: TokenStore,
    events: SessionEvents,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    if transport is None:
        # No connection retries here: auth calls never retry, gateway reads retry in GatewayClient
        transport = httpx.AsyncHTTPTransport(verify=settings.VERIFY_SSL)
    return httpx.AsyncClient(
        base_url=settings.API_GATEWAY_URL,
        transport=transport,
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        verify=settings.VERIFY_SSL,
        headers={"Accept": "application/json"},
        event_hooks=build_auth_hooks(settings, store, events),
    )


async def close_http_client(client: httpx.AsyncClient) -> None:
    await client.aclose()
