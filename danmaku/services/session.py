from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from danmaku.core.errors import RunSupersededError
from danmaku.core.i18n import normalize_locale, t
from danmaku.domain.entities import MatchSummary, PipelineState, PipelineStatus, ReadyResult
from danmaku.domain.ports.playback import PlaybackController, StatusListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunToken:
    run_id: int


def render_status_message(locale: str, state: PipelineState, summary: MatchSummary | None = None) -> str:
    if state is PipelineState.READY and summary is not None:
        precision = t(locale, "precision_exact" if summary.is_exact_match else "precision_fuzzy")
        return t(
            locale,
            "ready",
            precision=precision,
            episode_id=summary.episode_id,
            anime_title=summary.anime_title,
            episode_title=summary.episode_title,
            comment_count=summary.comment_count,
        )
    return t(locale, state.value)


class DanmakuSession:
    """State of one playback session, independent of any UI framework.

    Each file selection begins a new run and receives a :class:`RunToken`.
    Only the holder of the current token may change status or publish a
    result; a superseded run gets :class:`RunSupersededError` instead.
    """

    VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
        PipelineState.IDLE: {PipelineState.MATCHING},
        PipelineState.MATCHING: {PipelineState.SELECTING, PipelineState.MATCH_FAILED},
        PipelineState.SELECTING: {PipelineState.FETCHING_COMMENTS, PipelineState.MATCH_FAILED},
        PipelineState.FETCHING_COMMENTS: {PipelineState.READY, PipelineState.COMMENTS_FAILED},
        PipelineState.READY: set(),
        PipelineState.MATCH_FAILED: set(),
        PipelineState.COMMENTS_FAILED: set(),
    }

    def __init__(self, *, playback: PlaybackController, locale: str = "zh") -> None:
        self._playback = playback
        self._locale = normalize_locale(locale)
        self._listeners: list[StatusListener] = []
        self._run_id = 0
        self._state = PipelineState.IDLE
        self._reason: str | None = None
        self._result: ReadyResult | None = None

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def result(self) -> ReadyResult | None:
        return self._result

    @property
    def playback(self) -> PlaybackController:
        return self._playback

    @property
    def status(self) -> PipelineStatus:
        return self.status_for(self._locale)

    def status_for(self, locale: str) -> PipelineStatus:
        summary = self._result.summary if self._result is not None else None
        return PipelineStatus(
            state=self._state,
            run_id=self._run_id,
            message=render_status_message(locale, self._state, summary),
            reason=self._reason,
            summary=summary,
        )

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def begin_run(self) -> RunToken:
        self._run_id += 1
        self._state = PipelineState.IDLE
        self._reason = None
        self._result = None
        logger.debug("run_started", extra={"run": self._run_id})
        return RunToken(run_id=self._run_id)

    def is_current(self, token: RunToken) -> bool:
        return token.run_id == self._run_id

    def ensure_current(self, token: RunToken) -> None:
        if not self.is_current(token):
            raise RunSupersededError(token.run_id)

    def can_transition(self, from_state: PipelineState, to_state: PipelineState) -> bool:
        return to_state in self.VALID_TRANSITIONS.get(from_state, set())

    def transition(self, token: RunToken, to_state: PipelineState, *, reason: str | None = None) -> PipelineStatus:
        self.ensure_current(token)
        if to_state is PipelineState.READY:
            raise ValueError("READY is entered through complete()")
        self._move(to_state, reason=reason)
        return self.status

    async def complete(self, token: RunToken, result: ReadyResult) -> PipelineStatus:
        """Hand the result to the player and enter READY.

        Raises :class:`PlaybackError` when the player cannot be built; the
        session then stays in FETCHING_COMMENTS for the caller to fail.
        """
        self.ensure_current(token)
        if not self.can_transition(self._state, PipelineState.READY):
            raise ValueError(f"invalid transition {self._state.value} -> ready")

        installed = await self._playback.configure(result.playback, is_current=lambda: self.is_current(token))
        if not installed:
            raise RunSupersededError(token.run_id)
        self.ensure_current(token)

        self._result = result
        self._move(PipelineState.READY)
        return self.status

    async def reset(self) -> None:
        """Tear the session down to IDLE, superseding any run in flight."""
        self._run_id += 1
        self._state = PipelineState.IDLE
        self._reason = None
        self._result = None
        try:
            await self._playback.close()
        finally:
            self._notify()

    def _move(self, to_state: PipelineState, *, reason: str | None = None) -> None:
        if not self.can_transition(self._state, to_state):
            raise ValueError(f"invalid transition {self._state.value} -> {to_state.value}")
        self._state = to_state
        self._reason = reason
        self._notify()
        if to_state.is_terminal:
            logger.info("run_finished", extra={"run": self._run_id, "state": to_state.value})

    def _notify(self) -> None:
        message = self.status.message
        logger.info(
            "pipeline_status",
            extra={"run": self._run_id, "state": self._state.value, "reason": self._reason},
        )
        for listener in list(self._listeners):
            listener(message)
