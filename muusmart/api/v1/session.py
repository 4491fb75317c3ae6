from __future__ import annotations

from fastapi import APIRouter, Depends

from muusmart.api.deps import get_navigator, get_session_events, get_session_manager
from muusmart.clients.navigator import Navigator
from muusmart.core.signals import FocusEvent, SessionEvents
from muusmart.schemas.enums import LogoutReason
from muusmart.schemas.requests import LoginRequest, RegisterRequest
from muusmart.schemas.responses import SessionStateResponse
from muusmart.services.session_manager import SessionManager

router = APIRouter(prefix="/session")


def _respond(session: SessionManager, navigator: Navigator) -> SessionStateResponse:
    return SessionStateResponse.from_state(session.state, navigator.current_route)


@router.get("", response_model=SessionStateResponse)
async def get_session(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    return _respond(session, navigator)


@router.post("/login", response_model=SessionStateResponse)
async def login(
    body: LoginRequest,
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    await session.login(body)
    return _respond(session, navigator)


@router.post("/register", response_model=SessionStateResponse)
async def register(
    body: RegisterRequest,
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    await session.register(body)
    return _respond(session, navigator)


@router.post("/logout", response_model=SessionStateResponse)
async def logout(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    session.logout(LogoutReason.MANUAL)
    return _respond(session, navigator)


@router.post("/focus", response_model=SessionStateResponse)
async def focus(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
    events: SessionEvents = Depends(get_session_events),
) -> SessionStateResponse:
    """Front end reports that the view became visible again."""
    events.focus.emit(FocusEvent(source="visibility"))
    return _respond(session, navigator)


@router.delete("/expired-reason", response_model=SessionStateResponse)
async def clear_expired_reason(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    session.clear_session_expired_reason()
    return _respond(session, navigator)


@router.delete("/welcome", response_model=SessionStateResponse)
async def clear_welcome(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    session.clear_welcome_notification()
    return _respond(session, navigator)


@router.delete("/new-user", response_model=SessionStateResponse)
async def clear_new_user(
    session: SessionManager = Depends(get_session_manager),
    navigator: Navigator = Depends(get_navigator),
) -> SessionStateResponse:
    session.clear_new_user()
    return _respond(session, navigator)
