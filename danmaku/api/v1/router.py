from __future__ import annotations

from fastapi import APIRouter

from danmaku.api.v1.routes.health import router as health_router
from danmaku.api.v1.routes.session import router as session_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(session_router, tags=["session"])
