from __future__ import annotations

from fastapi import Request

from muusmart.clients.navigator import Navigator
from muusmart.core.signals import SessionEvents
from muusmart.services.gateway_client import GatewayClient
from muusmart.services.session_manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_navigator(request: Request) -> Navigator:
    return request.app.state.navigator


def get_session_events(request: Request) -> SessionEvents:
    return request.app.state.session_events


def get_gateway_client(request: Request) -> GatewayClient:
    return request.app.state.gateway_client
