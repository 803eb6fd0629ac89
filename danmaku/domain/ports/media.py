from __future__ import annotations

from typing import Protocol


class MediaSource(Protocol):
    name: str
    source_url: str

    async def size(self) -> int:
        ...

    async def read(self, limit: int) -> bytes:
        ...
