"""Shared fixtures: in-memory media sources and a scripted dandanplay fake."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from danmaku.infrastructure.dandanplay.comment_client import DandanplayCommentClient
from danmaku.infrastructure.dandanplay.match_client import DandanplayMatchClient
from danmaku.infrastructure.playback.player_slot import PlayerSlot
from danmaku.services.comment_normalizer import CommentNormalizer
from danmaku.services.fingerprint import ContentFingerprinter
from danmaku.services.pipeline import DanmakuPipeline
from danmaku.services.session import DanmakuSession

MATCH_URL = "https://dandan.test/api/v2/match"
COMMENT_URL = "https://dandan.test/api/v2/comment"

HAPPY_MATCH = {
    "errorCode": 0,
    "success": True,
    "isMatched": True,
    "matches": [
        {"episodeId": "42", "animeId": 4, "animeTitle": "X", "episodeTitle": "Y", "type": "tvseries"},
    ],
}

HAPPY_COMMENTS = {
    "count": 2,
    "comments": [
        {"cid": 1, "p": "10,1,16711680,[bili]", "m": "first"},
        {"cid": 2, "p": "12.5,1,16777215", "m": "hello"},
    ],
}


class MemoryMediaSource:
    """MediaSource over a bytes buffer that records every read request."""

    def __init__(
        self,
        data: bytes,
        *,
        name: str = "episode.mkv",
        size: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.source_url = f"memory://{name}"
        self._data = data
        self._size = len(data) if size is None else size
        self._error = error
        self.read_limits: list[int] = []

    async def size(self) -> int:
        return self._size

    async def read(self, limit: int) -> bytes:
        if self._error is not None:
            raise self._error
        self.read_limits.append(limit)
        return self._data[:limit]


class FakeDandanplay:
    """Serves scripted match/comment payloads through ``httpx.MockTransport``."""

    def __init__(
        self,
        *,
        match_payload: Any = None,
        comment_payload: Any = None,
        match_status: int = 200,
        comment_status: int = 200,
    ) -> None:
        self.match_payload = HAPPY_MATCH if match_payload is None else match_payload
        self.comment_payload = HAPPY_COMMENTS if comment_payload is None else comment_payload
        self.match_status = match_status
        self.comment_status = comment_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/match"):
            return _respond(self.match_status, self.match_payload)
        if "/comment/" in path:
            return _respond(self.comment_status, self.comment_payload)
        return httpx.Response(404, json={"errorCode": 404})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def match_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/match")]

    @property
    def comment_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/comment/" in r.url.path]


def _respond(status: int, payload: Any) -> httpx.Response:
    if isinstance(payload, (bytes, str)):
        return httpx.Response(status, content=payload)
    return httpx.Response(status, json=payload)


@pytest.fixture
def fake_dandanplay() -> FakeDandanplay:
    return FakeDandanplay()


@pytest.fixture
async def http_client(fake_dandanplay):
    async with httpx.AsyncClient(transport=fake_dandanplay.transport()) as client:
        yield client


@pytest.fixture
def status_messages() -> list[str]:
    return []


@pytest.fixture
def session(status_messages) -> DanmakuSession:
    s = DanmakuSession(playback=PlayerSlot(), locale="zh")
    s.subscribe(status_messages.append)
    return s


@pytest.fixture
def pipeline(session, http_client) -> DanmakuPipeline:
    return DanmakuPipeline(
        session=session,
        fingerprinter=ContentFingerprinter(),
        match_client=DandanplayMatchClient(http_client=http_client, match_url=MATCH_URL),
        comment_client=DandanplayCommentClient(http_client=http_client, comment_url=COMMENT_URL),
        normalizer=CommentNormalizer(),
    )
