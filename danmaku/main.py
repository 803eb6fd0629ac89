from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from danmaku.api.v1.router import router as v1_router
from danmaku.core.config import Settings, get_settings
from danmaku.core.exception_handlers import register_exception_handlers
from danmaku.core.logging import setup_logging
from danmaku.core.middleware.access_log import AccessLogMiddleware
from danmaku.core.middleware.request_id import RequestIdMiddleware
from danmaku.infrastructure.dandanplay.comment_client import DandanplayCommentClient
from danmaku.infrastructure.dandanplay.match_client import DandanplayMatchClient
from danmaku.infrastructure.playback.player_slot import PlayerSlot
from danmaku.services.comment_normalizer import CommentNormalizer
from danmaku.services.fingerprint import ContentFingerprinter
from danmaku.services.pipeline import DanmakuPipeline
from danmaku.services.session import DanmakuSession

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    docs_url = "/docs" if settings.docs_enabled else None
    redoc_url = "/redoc" if settings.docs_enabled else None
    openapi_url = "/openapi.json" if settings.docs_enabled else None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        await _startup(app, settings, transport=transport)
        try:
            yield
        finally:
            await _shutdown(app)

    app = FastAPI(
        title=settings.app_name,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        allow_credentials=settings.cors_allow_credentials,
    )

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(v1_router, prefix=settings.api_v1_prefix)

    return app


def build_pipeline(settings: Settings, http_client: httpx.AsyncClient) -> DanmakuPipeline:
    headers = settings.dandanplay_auth_headers()
    session = DanmakuSession(playback=PlayerSlot(), locale=settings.default_locale)
    return DanmakuPipeline(
        session=session,
        fingerprinter=ContentFingerprinter(),
        match_client=DandanplayMatchClient(
            http_client=http_client,
            match_url=settings.dandanplay_match_url,
            headers=headers,
        ),
        comment_client=DandanplayCommentClient(
            http_client=http_client,
            comment_url=settings.dandanplay_comment_url,
            headers=headers,
        ),
        normalizer=CommentNormalizer(honor_display_mode=settings.honor_display_mode),
    )


async def _startup(app: FastAPI, settings: Settings, *, transport: httpx.AsyncBaseTransport | None) -> None:
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"Accept": "application/json", "User-Agent": f"{settings.app_name}/0.1"},
        transport=transport,
    )
    app.state.http_client = http_client
    app.state.pipeline = build_pipeline(settings, http_client)

    logger.info(
        "startup_complete",
        extra={"match_url": settings.dandanplay_match_url, "default_locale": settings.default_locale},
    )


async def _shutdown(app: FastAPI) -> None:
    pipeline: DanmakuPipeline | None = getattr(app.state, "pipeline", None)
    if pipeline is not None:
        try:
            await pipeline.session.playback.close()
        except Exception:  # noqa: BLE001
            logger.warning("player_close_failed", exc_info=True)

    http_client = getattr(app.state, "http_client", None)
    if http_client is not None:
        try:
            await http_client.aclose()
        except Exception:  # noqa: BLE001
            logger.warning("http_client_close_failed", exc_info=True)


app = create_app()
