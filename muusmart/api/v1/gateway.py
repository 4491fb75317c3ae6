from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from muusmart.api.deps import get_gateway_client
from muusmart.services.gateway_client import GatewayClient

router = APIRouter(prefix="/gateway")


@router.get("/{path:path}")
async def read_gateway(
    path: str,
    request: Request,
    gateway: GatewayClient = Depends(get_gateway_client),
) -> Any:
    """Authenticated read-through to the API gateway for the dashboard modules.

    A 401/403 from upstream ends the session through the unauthorized signal.
    """
    return await gateway.get(f"/{path}", params=dict(request.query_params))
