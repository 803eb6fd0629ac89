from __future__ import annotations

import logging
from typing import Any

import httpx

from danmaku.core.errors import MatchServiceError
from danmaku.domain.entities import MatchCandidate, MatchQuery, MatchResult
from danmaku.domain.ports.match import MatchClient

logger = logging.getLogger(__name__)


class DandanplayMatchClient(MatchClient):
    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        match_url: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._client = http_client
        self._url = match_url
        self._headers = dict(headers or {})

    async def match(self, query: MatchQuery) -> MatchResult:
        logger.info(
            "match_request",
            extra={"file_hash": query.file_hash, "file_name": query.file_name, "file_size": query.file_size},
        )
        try:
            resp = await self._client.post(self._url, json=query.to_payload(), headers=self._headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise MatchServiceError(f"match transport failure: {exc}") from exc
        except ValueError as exc:
            raise MatchServiceError("match response is not json") from exc

        result = _parse_match_result(data)
        logger.info(
            "match_response",
            extra={"error_code": result.error_code, "is_matched": result.is_matched, "matches": len(result.matches)},
        )
        return result


def _parse_match_result(data: Any) -> MatchResult:
    if not isinstance(data, dict):
        raise MatchServiceError("match response is not an object")

    error_code = data.get("errorCode")
    if not isinstance(error_code, int) or isinstance(error_code, bool):
        raise MatchServiceError("match response errorCode missing or not int")

    is_matched = data.get("isMatched")
    if is_matched is None and error_code != 0:
        is_matched = False
    if not isinstance(is_matched, bool):
        raise MatchServiceError("match response isMatched missing or not bool")

    error_message = data.get("errorMessage")
    if not isinstance(error_message, str):
        error_message = ""

    raw_matches = data.get("matches")
    if raw_matches is None and error_code != 0:
        raw_matches = []
    if not isinstance(raw_matches, list):
        raise MatchServiceError("match response matches missing or not a list")

    matches = [_parse_candidate(item, is_exact=is_matched) for item in raw_matches]
    return MatchResult(
        error_code=error_code,
        is_matched=is_matched,
        matches=matches,
        error_message=error_message,
    )


def _parse_candidate(item: Any, *, is_exact: bool) -> MatchCandidate:
    if not isinstance(item, dict):
        raise MatchServiceError("match entry is not an object")

    episode_id = item.get("episodeId")
    if isinstance(episode_id, bool) or not isinstance(episode_id, (int, str)):
        raise MatchServiceError("match entry episodeId missing or invalid")
    episode_id = str(episode_id).strip()
    if not episode_id:
        raise MatchServiceError("match entry episodeId empty")

    anime_title = item.get("animeTitle")
    episode_title = item.get("episodeTitle")
    if not isinstance(anime_title, str) or not isinstance(episode_title, str):
        raise MatchServiceError("match entry titles missing or not strings")

    return MatchCandidate(
        episode_id=episode_id,
        anime_title=anime_title,
        episode_title=episode_title,
        is_exact_match=is_exact,
    )
