from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from danmaku.core.context import run_id_ctx_var
from danmaku.core.errors import (
    CommentServiceError,
    MatchServiceError,
    NoMatchFoundError,
    PlaybackError,
    PipelineError,
    ReadError,
    RunSupersededError,
)
from danmaku.domain.entities import (
    Comment,
    MatchCandidate,
    MatchQuery,
    MatchResult,
    MatchSummary,
    PipelineState,
    PipelineStatus,
    PlaybackConfig,
    ReadyResult,
)
from danmaku.domain.ports.comments import CommentClient
from danmaku.domain.ports.match import MatchClient
from danmaku.domain.ports.media import MediaSource
from danmaku.services.comment_normalizer import CommentNormalizer
from danmaku.services.fingerprint import ContentFingerprinter
from danmaku.services.match_selector import select_match
from danmaku.services.session import DanmakuSession, RunToken

logger = logging.getLogger(__name__)

MatchSelector = Callable[[Sequence[MatchCandidate]], MatchCandidate]


class DanmakuPipeline:
    """fingerprint -> match -> select -> fetch comments -> normalize -> publish.

    Stages run as sequential awaits. The first failing stage ends the run in
    MATCH_FAILED or COMMENTS_FAILED; a player that cannot be built
    counts as COMMENTS_FAILED. Nothing is retried.
    """

    def __init__(
        self,
        *,
        session: DanmakuSession,
        fingerprinter: ContentFingerprinter,
        match_client: MatchClient,
        comment_client: CommentClient,
        normalizer: CommentNormalizer,
        selector: MatchSelector = select_match,
    ) -> None:
        self._session = session
        self._fingerprinter = fingerprinter
        self._match_client = match_client
        self._comment_client = comment_client
        self._normalizer = normalizer
        self._select = selector

    @property
    def session(self) -> DanmakuSession:
        return self._session

    async def on_file_chosen(self, source: MediaSource) -> PipelineStatus:
        token = self._session.begin_run()
        run_id_ctx_var.set(str(token.run_id))
        logger.info("file_chosen", extra={"file_name": source.name})
        try:
            await self._run(token, source)
        except RunSupersededError:
            logger.info("run_superseded", extra={"run": token.run_id})
        return self._session.status

    async def _run(self, token: RunToken, source: MediaSource) -> None:
        session = self._session
        session.transition(token, PipelineState.MATCHING)

        try:
            fingerprint, result = await self._match(token, source)
        except (ReadError, MatchServiceError, NoMatchFoundError) as exc:
            self._fail(token, PipelineState.MATCH_FAILED, exc)
            return

        session.transition(token, PipelineState.SELECTING)
        try:
            candidate = self._select(result.matches)
        except NoMatchFoundError as exc:
            self._fail(token, PipelineState.MATCH_FAILED, exc)
            return

        session.transition(token, PipelineState.FETCHING_COMMENTS)
        try:
            comments = await self._fetch_comments(token, candidate)
        except CommentServiceError as exc:
            self._fail(token, PipelineState.COMMENTS_FAILED, exc)
            return

        ready = ReadyResult(
            playback=PlaybackConfig(source_url=source.source_url, comments=tuple(comments)),
            summary=MatchSummary(
                is_exact_match=result.is_matched,
                episode_id=candidate.episode_id,
                anime_title=candidate.anime_title,
                episode_title=candidate.episode_title,
                comment_count=len(comments),
            ),
            match=candidate,
            fingerprint=fingerprint,
        )
        try:
            await session.complete(token, ready)
        except PlaybackError as exc:
            self._fail(token, PipelineState.COMMENTS_FAILED, exc)

    async def _match(self, token: RunToken, source: MediaSource) -> tuple[str, MatchResult]:
        probe = await self._fingerprinter.probe(source)
        fingerprint = self._fingerprinter.digest(probe)
        self._session.ensure_current(token)

        query = MatchQuery(file_hash=fingerprint, file_name=probe.file_name, file_size=probe.file_size)
        result = await self._match_client.match(query)
        self._session.ensure_current(token)

        if result.error_code != 0:
            raise NoMatchFoundError(f"errorCode={result.error_code} {result.error_message}".strip())
        if not result.matches:
            raise NoMatchFoundError("service returned no matches")
        return fingerprint, result

    async def _fetch_comments(self, token: RunToken, candidate: MatchCandidate) -> list[Comment]:
        raw = await self._comment_client.fetch_raw(candidate.episode_id)
        self._session.ensure_current(token)
        return self._normalizer.normalize(raw)

    def _fail(self, token: RunToken, state: PipelineState, exc: PipelineError) -> None:
        logger.info("pipeline_failed", extra={"state": state.value, "code": exc.code, "detail": exc.log_detail})
        self._session.transition(token, state, reason=exc.reason)
