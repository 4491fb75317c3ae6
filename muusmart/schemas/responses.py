from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from muusmart.schemas.enums import ErrorCode, Route, SessionExpiredReason


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "muusmart-session"


class AuthResponse(BaseModel):
    """Body returned by the gateway's login and register endpoints."""

    token: str


class SessionState(BaseModel):
    """Read-only snapshot of the session, handed to subscribers."""

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    is_loading: bool = False
    session_expired_reason: SessionExpiredReason | None = None
    show_welcome_notification: bool = False
    is_new_user: bool = False
    username: str | None = None
    expires_in: float | None = Field(default=None, description="Seconds until token expiry")

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


class SessionStateResponse(BaseModel):
    is_authenticated: bool
    is_loading: bool
    session_expired_reason: SessionExpiredReason | None = None
    show_welcome_notification: bool = False
    is_new_user: bool = False
    username: str | None = None
    expires_in: float | None = None
    redirect_to: Route | None = None

    @classmethod
    def from_state(cls, state: SessionState, redirect_to: Route | None) -> SessionStateResponse:
        return cls(
            is_authenticated=state.is_authenticated,
            is_loading=state.is_loading,
            session_expired_reason=state.session_expired_reason,
            show_welcome_notification=state.show_welcome_notification,
            is_new_user=state.is_new_user,
            username=state.username,
            expires_in=state.expires_in,
            redirect_to=redirect_to,
        )


class ErrorResponse(BaseModel):
    error_code: ErrorCode
    message: str
    detail: str | None = None
