from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class AppError(Exception):
    code: str
    http_status: int
    log_detail: str | None = None
    extra: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.log_detail or self.code

    @property
    def reason(self) -> str:
        if self.log_detail:
            return f"{self.code}: {self.log_detail}"
        return self.code


class PipelineError(AppError):
    """Terminal failure of one pipeline stage; ends the current run."""


class ReadError(PipelineError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="read_error", http_status=422, log_detail=log_detail)


class MatchServiceError(PipelineError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="match_service_error", http_status=502, log_detail=log_detail)


class NoMatchFoundError(PipelineError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="no_match_found", http_status=404, log_detail=log_detail)


class CommentServiceError(PipelineError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="comment_service_error", http_status=502, log_detail=log_detail)


class PlaybackError(PipelineError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="playback_error", http_status=500, log_detail=log_detail)


class RunSupersededError(AppError):
    """Raised inside a run whose token was replaced by a newer file selection."""

    def __init__(self, run_id: int) -> None:
        super().__init__(
            code="run_superseded",
            http_status=409,
            log_detail=f"run {run_id} superseded",
            extra={"run_id": run_id},
        )


class RequestInvalidError(AppError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="request_invalid", http_status=422, log_detail=log_detail)


class PlaybackNotReadyError(AppError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="playback_not_ready", http_status=404, log_detail=log_detail)


class InternalError(AppError):
    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(code="internal_error", http_status=500, log_detail=log_detail)
