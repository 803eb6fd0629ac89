from __future__ import annotations

from fastapi import Depends, Request

from danmaku.core.config import Settings, get_settings
from danmaku.core.context import locale_ctx_var
from danmaku.core.i18n import infer_locale_from_headers
from danmaku.services.pipeline import DanmakuPipeline
from danmaku.services.session import DanmakuSession


def settings_dep(request: Request) -> Settings:
    settings: Settings | None = getattr(request.app.state, "settings", None)
    return settings or get_settings()


def locale_dep(request: Request, settings: Settings = Depends(settings_dep)) -> str:
    locale = infer_locale_from_headers(
        request.headers,
        default_locale=settings.default_locale,
        locale_header=settings.locale_header,
    )
    request.state.locale = locale
    locale_ctx_var.set(locale)
    return locale


def pipeline_dep(request: Request) -> DanmakuPipeline:
    pipeline: DanmakuPipeline | None = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("Danmaku pipeline is not initialized")
    return pipeline


def session_dep(pipeline: DanmakuPipeline = Depends(pipeline_dep)) -> DanmakuSession:
    return pipeline.session
