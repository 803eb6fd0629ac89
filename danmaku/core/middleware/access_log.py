from __future__ import annotations

import logging
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def _session_fields(request: Request) -> dict[str, Any]:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        return {}
    session = pipeline.session
    return {"session_run": session.run_id, "session_state": session.state.value}


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` line per request, tagged with the session run it left behind."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        start = time.monotonic()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.info(
                "http_request",
                extra={
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_status": status_code,
                    "duration_ms": duration_ms,
                    **_session_fields(request),
                },
            )
