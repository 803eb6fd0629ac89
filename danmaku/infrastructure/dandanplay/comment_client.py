from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from danmaku.core.errors import CommentServiceError
from danmaku.domain.entities import RawCommentEntry
from danmaku.domain.ports.comments import CommentClient

logger = logging.getLogger(__name__)

# Related sources merged in, converted to simplified script.
_FIXED_PARAMS: dict[str, str] = {"withRelated": "true", "chConvert": "1"}


class DandanplayCommentClient(CommentClient):
    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        comment_url: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._client = http_client
        self._base_url = comment_url.rstrip("/")
        self._headers = dict(headers or {})

    async def fetch_raw(self, episode_id: str) -> list[RawCommentEntry]:
        url = f"{self._base_url}/{quote(str(episode_id), safe='')}"
        logger.info("comments_request", extra={"episode_id": episode_id})
        try:
            resp = await self._client.get(url, params=_FIXED_PARAMS, headers=self._headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise CommentServiceError(f"comment transport failure: {exc}") from exc
        except ValueError as exc:
            raise CommentServiceError("comment response is not json") from exc

        entries = _parse_comments(data)
        logger.info("comments_response", extra={"episode_id": episode_id, "count": len(entries)})
        return entries


def _parse_comments(data: Any) -> list[RawCommentEntry]:
    comments = data.get("comments") if isinstance(data, dict) else None
    if not isinstance(comments, list):
        raise CommentServiceError("comment response comments missing or not a list")
    return [_parse_entry(item) for item in comments]


def _parse_entry(item: Any) -> RawCommentEntry:
    if not isinstance(item, dict):
        return RawCommentEntry(params="", text="")
    params = item.get("p")
    text = item.get("m")
    return RawCommentEntry(
        params=params if isinstance(params, str) else "",
        text=text if isinstance(text, str) else "",
    )
