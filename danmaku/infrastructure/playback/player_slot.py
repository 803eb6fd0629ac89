from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from danmaku.core.errors import PlaybackError
from danmaku.domain.entities import PlaybackConfig
from danmaku.domain.ports.playback import PlaybackController, PlayerInstance

logger = logging.getLogger(__name__)

PlayerFactory = Callable[[PlaybackConfig], Awaitable[PlayerInstance]]


class InMemoryPlayer(PlayerInstance):
    """Holds the configuration a browser-side renderer is served from."""

    def __init__(self, config: PlaybackConfig) -> None:
        self._config = config
        self.released = False

    @property
    def config(self) -> PlaybackConfig:
        return self._config

    async def release(self) -> None:
        self.released = True


async def in_memory_player_factory(config: PlaybackConfig) -> PlayerInstance:
    return InMemoryPlayer(config)


def _always_current() -> bool:
    return True


class PlayerSlot(PlaybackController):
    """Owns at most one live player instance.

    ``configure`` calls are serialized. The previous instance is released
    before the next one is built, so a failed build leaves the slot empty.
    ``is_current`` is consulted again once the build returns; a caller that
    went stale meanwhile gets its fresh instance released instead of
    installed.
    """

    def __init__(self, *, factory: PlayerFactory = in_memory_player_factory) -> None:
        self._factory = factory
        self._player: PlayerInstance | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> PlaybackConfig | None:
        if self._player is None:
            return None
        return self._player.config

    async def configure(self, config: PlaybackConfig, *, is_current: Callable[[], bool] = _always_current) -> bool:
        async with self._lock:
            if not is_current():
                return False

            await self.close()
            try:
                player = await self._factory(config)
            except Exception as exc:  # noqa: BLE001
                raise PlaybackError(f"player construction failed: {exc!r}") from exc

            if not is_current():
                await player.release()
                logger.info("player_discarded", extra={"source_url": config.source_url})
                return False

            displaced, self._player = self._player, player
            if displaced is not None:
                await displaced.release()

        logger.info(
            "player_configured",
            extra={"source_url": config.source_url, "comments": len(config.comments)},
        )
        return True

    async def close(self) -> None:
        previous, self._player = self._player, None
        if previous is not None:
            await previous.release()
