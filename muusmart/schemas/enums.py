from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    REGISTRATION_FAILED = "REGISTRATION_FAILED"
    TOKEN_ALREADY_EXPIRED = "TOKEN_ALREADY_EXPIRED"
    AUTH_SERVICE_UNAVAILABLE = "AUTH_SERVICE_UNAVAILABLE"
    SESSION_CHANGED = "SESSION_CHANGED"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class LogoutReason(str, Enum):
    MANUAL = "manual"
    EXPIRED = "expired"


class SessionExpiredReason(str, Enum):
    EXPIRED = "expired"


class Route(str, Enum):
    LOGIN = "/login"
    DASHBOARD = "/dashboard"
