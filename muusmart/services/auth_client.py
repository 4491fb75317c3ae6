from __future__ import annotations

import httpx
from pydantic import ValidationError

from muusmart.config import Settings
from muusmart.core.exceptions import (
    AuthServiceUnavailableError,
    InvalidCredentialsError,
    RegistrationFailedError,
)
from muusmart.core.logging import get_logger
from muusmart.schemas.requests import LoginRequest, RegisterRequest
from muusmart.schemas.responses import AuthResponse

logger = get_logger(__name__)

# Statuses the gateway uses to reject a login attempt itself
CREDENTIAL_REJECTION_STATUSES = frozenset({400, 401, 403, 404, 422})


class AuthClient:
    """Calls the gateway's login and register endpoints. Never retries."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        try:
            resp = await self._client.post(
                self._settings.AUTH_LOGIN_PATH, json=credentials.model_dump()
            )
        except httpx.HTTPError as exc:
            logger.warning("login_transport_failed", error=str(exc))
            raise AuthServiceUnavailableError(
                message="Authentication service unreachable", detail=str(exc)
            ) from exc

        if resp.status_code in CREDENTIAL_REJECTION_STATUSES:
            logger.info("login_rejected", username=credentials.username, status=resp.status_code)
            raise InvalidCredentialsError(
                message="Invalid username or password",
                detail=f"status={resp.status_code}",
            )
        if resp.is_error:
            raise AuthServiceUnavailableError(
                message="Authentication service failed",
                detail=f"status={resp.status_code}",
            )

        try:
            return AuthResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise AuthServiceUnavailableError(
                message="Authentication service returned no token",
                detail=str(exc)[:200],
            ) from exc

    async def register(self, payload: RegisterRequest) -> AuthResponse:
        try:
            resp = await self._client.post(
                self._settings.AUTH_REGISTER_PATH, json=payload.model_dump()
            )
            resp.raise_for_status()
            return AuthResponse.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.info(
                "register_rejected",
                username=payload.username,
                status=exc.response.status_code,
            )
            raise RegistrationFailedError(
                message="Registration failed",
                detail=f"status={exc.response.status_code} body={exc.response.text[:100]}",
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("register_transport_failed", error=str(exc))
            raise RegistrationFailedError(
                message="Registration failed", detail=str(exc)
            ) from exc
        except (ValueError, ValidationError) as exc:
            raise RegistrationFailedError(
                message="Registration returned no token", detail=str(exc)[:200]
            ) from exc
