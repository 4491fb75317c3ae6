from __future__ import annotations

from typing import Any

import httpx

from muusmart.config import Settings
from muusmart.core.exceptions import GatewayError
from muusmart.core.logging import get_logger
from muusmart.utils.retry import with_retry

logger = get_logger(__name__)


class GatewayClient:
    """Authenticated access to the API gateway for the farm feature modules.

    Shares the hooked httpx client, so every call carries the bearer token and
    any 401/403 raises the process-wide unauthorized signal. Reads are retried
    here and only here; the transport itself does not retry.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._retrying = with_retry(settings.MAX_RETRIES, settings.BACKOFF_FACTOR)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        @self._retrying
        async def fetch() -> Any:
            resp = await self._client.get(path, params=params)
            return self._decode(resp)

        try:
            return await fetch()
        except httpx.TransportError as exc:
            raise self._unreachable("GET", path, exc) from exc

    async def post(self, path: str, json: Any = None) -> Any:
        try:
            resp = await self._client.post(path, json=json)
        except httpx.TransportError as exc:
            raise self._unreachable("POST", path, exc) from exc
        return self._decode(resp)

    @staticmethod
    def _unreachable(method: str, path: str, exc: httpx.TransportError) -> GatewayError:
        logger.error("gateway_unreachable", method=method, path=path, error=str(exc))
        return GatewayError(message="Gateway unreachable", detail=f"{method} {path}: {exc}")

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if resp.is_error:
            logger.warning(
                "gateway_request_failed",
                status=resp.status_code,
                url=str(resp.request.url),
            )
            raise GatewayError(
                message="Gateway request failed",
                detail=f"{resp.request.method} {resp.request.url.path} -> {resp.status_code}",
                upstream_status=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise GatewayError(
                message="Gateway returned a non-JSON body",
                detail=f"{resp.request.method} {resp.request.url.path}",
                upstream_status=resp.status_code,
            ) from exc
