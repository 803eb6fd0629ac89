from __future__ import annotations

import asyncio
from pathlib import Path

from danmaku.domain.ports.media import MediaSource


class LocalMediaFile(MediaSource):
    """A media file on local disk; playback reads it in place via ``file://``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self.name = self._path.name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def source_url(self) -> str:
        return self._path.resolve().as_uri()

    async def size(self) -> int:
        stat = await asyncio.to_thread(self._path.stat)
        return int(stat.st_size)

    async def read(self, limit: int) -> bytes:
        return await asyncio.to_thread(_read_prefix, self._path, int(limit))


def _read_prefix(path: Path, limit: int) -> bytes:
    if limit <= 0:
        return b""
    with path.open("rb") as fh:
        return fh.read(limit)
