from __future__ import annotations

from pydantic import BaseModel, Field

from danmaku.domain.entities import Comment, MatchSummary, PipelineStatus, PlaybackConfig


class ChooseFileRequest(BaseModel):
    path: str = Field(min_length=1, max_length=4096)


class MatchSummaryOut(BaseModel):
    is_exact_match: bool
    episode_id: str
    anime_title: str
    episode_title: str
    comment_count: int = Field(ge=0)

    @classmethod
    def from_summary(cls, summary: MatchSummary) -> "MatchSummaryOut":
        return cls(
            is_exact_match=summary.is_exact_match,
            episode_id=summary.episode_id,
            anime_title=summary.anime_title,
            episode_title=summary.episode_title,
            comment_count=summary.comment_count,
        )


class SessionStatusOut(BaseModel):
    state: str
    run_id: int
    message: str
    reason: str | None = None
    summary: MatchSummaryOut | None = None

    @classmethod
    def from_status(cls, status: PipelineStatus) -> "SessionStatusOut":
        return cls(
            state=status.state.value,
            run_id=status.run_id,
            message=status.message,
            reason=status.reason,
            summary=MatchSummaryOut.from_summary(status.summary) if status.summary is not None else None,
        )


class DanmakuOut(BaseModel):
    """One comment in the shape artplayer-plugin-danmuku consumes."""

    text: str
    time: float = Field(ge=0.0)
    color: str = Field(pattern=r"^#[0-9a-f]{6}$")
    border: bool
    mode: int

    @classmethod
    def from_comment(cls, comment: Comment) -> "DanmakuOut":
        return cls(
            text=comment.text,
            time=comment.time,
            color=comment.css_color,
            border=comment.border,
            mode=int(comment.mode),
        )


class PlaybackOut(BaseModel):
    source_url: str
    comments: list[DanmakuOut]

    @classmethod
    def from_config(cls, config: PlaybackConfig) -> "PlaybackOut":
        return cls(
            source_url=config.source_url,
            comments=[DanmakuOut.from_comment(c) for c in config.comments],
        )


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
    request_id: str
