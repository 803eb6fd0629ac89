from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

WHITE = 0xFFFFFF


@dataclass(frozen=True)
class FileProbe:
    content: bytes
    file_name: str
    file_size: int


@dataclass(frozen=True)
class MatchQuery:
    file_hash: str
    file_name: str
    file_size: int

    def to_payload(self) -> dict[str, str | int]:
        return {
            "fileHash": self.file_hash,
            "fileName": self.file_name,
            "fileSize": self.file_size,
        }


@dataclass(frozen=True)
class MatchCandidate:
    episode_id: str
    anime_title: str
    episode_title: str
    is_exact_match: bool


@dataclass(frozen=True)
class MatchResult:
    error_code: int
    is_matched: bool
    matches: list[MatchCandidate]
    error_message: str = ""


@dataclass(frozen=True)
class RawCommentEntry:
    params: str
    text: str


class DisplayMode(IntEnum):
    SCROLL = 0
    TOP = 1
    BOTTOM = 2


@dataclass(frozen=True)
class Comment:
    text: str
    time: float
    color: int
    border: bool
    mode: DisplayMode

    @property
    def css_color(self) -> str:
        return f"#{self.color:06x}"


class PipelineState(str, Enum):
    IDLE = "idle"
    MATCHING = "matching"
    SELECTING = "selecting"
    MATCH_FAILED = "match_failed"
    FETCHING_COMMENTS = "fetching_comments"
    COMMENTS_FAILED = "comments_failed"
    READY = "ready"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.READY, PipelineState.MATCH_FAILED, PipelineState.COMMENTS_FAILED)


@dataclass(frozen=True)
class MatchSummary:
    is_exact_match: bool
    episode_id: str
    anime_title: str
    episode_title: str
    comment_count: int


@dataclass(frozen=True)
class PlaybackConfig:
    source_url: str
    comments: tuple[Comment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReadyResult:
    playback: PlaybackConfig
    summary: MatchSummary
    match: MatchCandidate
    fingerprint: str


@dataclass(frozen=True)
class PipelineStatus:
    state: PipelineState
    run_id: int
    message: str
    reason: str | None = None
    summary: MatchSummary | None = None
