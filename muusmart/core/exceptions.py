from __future__ import annotations


class MuuSmartBaseError(Exception):
    """Base exception for all MuuSmart session errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class AuthError(MuuSmartBaseError):
    status_code = 401
    error_code = "AUTH_FAILED"


class InvalidCredentialsError(AuthError):
    status_code = 401
    error_code = "INVALID_CREDENTIALS"


class RegistrationFailedError(AuthError):
    status_code = 400
    error_code = "REGISTRATION_FAILED"


class TokenAlreadyExpiredError(AuthError):
    """Backend issued a token whose exp is already in the past (clock skew or backend bug)."""

    status_code = 401
    error_code = "TOKEN_ALREADY_EXPIRED"


class AuthServiceUnavailableError(AuthError):
    status_code = 502
    error_code = "AUTH_SERVICE_UNAVAILABLE"


class SessionChangedError(AuthError):
    """Session was logged out while a login/register request was in flight."""

    status_code = 409
    error_code = "SESSION_CHANGED"


class GatewayError(MuuSmartBaseError):
    status_code = 502
    error_code = "GATEWAY_ERROR"

    def __init__(
        self, message: str, detail: str | None = None, upstream_status: int | None = None
    ) -> None:
        super().__init__(message, detail)
        self.upstream_status = upstream_status


class TokenDecodeError(ValueError):
    """Token is not decodable or lacks a numeric exp. Internal only, never surfaced."""
