from __future__ import annotations

from typing import Protocol

from danmaku.domain.entities import MatchQuery, MatchResult


class MatchClient(Protocol):
    async def match(self, query: MatchQuery) -> MatchResult:
        ...
