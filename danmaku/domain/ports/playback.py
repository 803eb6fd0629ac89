from __future__ import annotations

from typing import Callable, Protocol

from danmaku.domain.entities import PlaybackConfig

StatusListener = Callable[[str], None]


class PlayerInstance(Protocol):
    @property
    def config(self) -> PlaybackConfig:
        ...

    async def release(self) -> None:
        ...


class PlaybackController(Protocol):
    @property
    def current(self) -> PlaybackConfig | None:
        ...

    async def configure(self, config: PlaybackConfig, *, is_current: Callable[[], bool] = ...) -> bool:
        """Install a player for ``config``; False when ``is_current`` turned false."""
        ...

    async def close(self) -> None:
        ...
