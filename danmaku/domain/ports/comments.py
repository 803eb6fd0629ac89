from __future__ import annotations

from typing import Protocol

from danmaku.domain.entities import RawCommentEntry


class CommentClient(Protocol):
    async def fetch_raw(self, episode_id: str) -> list[RawCommentEntry]:
        ...
