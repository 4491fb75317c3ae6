from __future__ import annotations

from fastapi import APIRouter

from muusmart.api.v1 import gateway, health, session

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["health"])
api_router.include_router(session.router, tags=["session"])
api_router.include_router(gateway.router, tags=["gateway"])
