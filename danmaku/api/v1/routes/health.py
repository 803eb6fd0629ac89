from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from danmaku.core.deps import session_dep
from danmaku.services.session import DanmakuSession


class HealthResponse(BaseModel):
    status: str = "ok"
    session_state: str


router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
async def healthz(session: DanmakuSession = Depends(session_dep)) -> HealthResponse:
    return HealthResponse(session_state=session.state.value)
