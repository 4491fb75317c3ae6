from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from muusmart.api.router import api_router
from muusmart.clients.http_client import close_http_client, create_http_client
from muusmart.clients.navigator import Navigator
from muusmart.clients.token_store import TokenStore, create_token_store
from muusmart.config import Settings
from muusmart.core.exceptions import MuuSmartBaseError
from muusmart.core.logging import setup_logging
from muusmart.core.middleware import muusmart_exception_handler
from muusmart.core.signals import SessionEvents
from muusmart.services.auth_client import AuthClient
from muusmart.services.gateway_client import GatewayClient
from muusmart.services.session_manager import SessionManager


def create_app(
    settings: Settings | None = None,
    store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_settings = settings or Settings()
        setup_logging(log_level=app_settings.LOG_LEVEL, debug=app_settings.DEBUG)
        token_store = store if store is not None else create_token_store(app_settings)
        events = SessionEvents()
        http_client = create_http_client(app_settings, token_store, events, transport=transport)
        navigator = Navigator()
        session = SessionManager(
            store=token_store,
            auth_client=AuthClient(client=http_client, settings=app_settings),
            navigator=navigator,
            events=events,
            storage_key=app_settings.TOKEN_STORAGE_KEY,
            check_interval=app_settings.EXPIRY_CHECK_INTERVAL,
            leeway=app_settings.EXPIRY_LEEWAY_SECONDS,
        )
        session.initialize()
        session.start()

        app.state.settings = app_settings
        app.state.session_events = events
        app.state.http_client = http_client
        app.state.gateway_client = GatewayClient(client=http_client, settings=app_settings)
        app.state.navigator = navigator
        app.state.session_manager = session
        yield
        session.dispose()
        await close_http_client(http_client)

    app = FastAPI(
        title="MuuSmart Session API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(MuuSmartBaseError, muusmart_exception_handler)
    app.include_router(api_router)
    return app


app = create_app()
