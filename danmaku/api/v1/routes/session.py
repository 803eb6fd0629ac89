from __future__ import annotations

from fastapi import APIRouter, Depends

from danmaku.core.deps import locale_dep, pipeline_dep, session_dep
from danmaku.core.errors import PlaybackNotReadyError
from danmaku.domain.schemas import ChooseFileRequest, ErrorResponse, PlaybackOut, SessionStatusOut
from danmaku.infrastructure.media.local_file import LocalMediaFile
from danmaku.services.pipeline import DanmakuPipeline
from danmaku.services.session import DanmakuSession

router = APIRouter()


@router.get("/session", response_model=SessionStatusOut)
async def get_session(
    locale: str = Depends(locale_dep),
    session: DanmakuSession = Depends(session_dep),
) -> SessionStatusOut:
    return SessionStatusOut.from_status(session.status_for(locale))


@router.post("/session/file", response_model=SessionStatusOut)
async def choose_file(
    body: ChooseFileRequest,
    locale: str = Depends(locale_dep),
    pipeline: DanmakuPipeline = Depends(pipeline_dep),
) -> SessionStatusOut:
    await pipeline.on_file_chosen(LocalMediaFile(body.path))
    return SessionStatusOut.from_status(pipeline.session.status_for(locale))


@router.get("/session/playback", response_model=PlaybackOut, responses={404: {"model": ErrorResponse}})
async def get_playback(session: DanmakuSession = Depends(session_dep)) -> PlaybackOut:
    config = session.playback.current
    if config is None:
        raise PlaybackNotReadyError("no configured player")
    return PlaybackOut.from_config(config)


@router.delete("/session", response_model=SessionStatusOut)
async def reset_session(
    locale: str = Depends(locale_dep),
    session: DanmakuSession = Depends(session_dep),
) -> SessionStatusOut:
    await session.reset()
    return SessionStatusOut.from_status(session.status_for(locale))
