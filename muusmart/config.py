from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API gateway
    API_GATEWAY_URL: str = "http://localhost:8080"
    AUTH_LOGIN_PATH: str = "/auth/login"
    AUTH_REGISTER_PATH: str = "/auth/register"

    # HTTP
    REQUEST_TIMEOUT: int = 30
    # Total attempts for idempotent gateway reads
    MAX_RETRIES: int = 3
    BACKOFF_FACTOR: float = 0.5
    VERIFY_SSL: bool = True
    UNAUTHORIZED_STATUSES: list[int] = [401, 403]

    # Session
    TOKEN_STORE_PATH: str = "~/.muusmart/session.json"
    TOKEN_STORAGE_KEY: str = "token"
    EXPIRY_CHECK_INTERVAL: float = 30.0
    EXPIRY_LEEWAY_SECONDS: float = 0.0

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
