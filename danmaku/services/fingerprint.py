from __future__ import annotations

import hashlib
import logging

from danmaku.core.errors import ReadError
from danmaku.domain.entities import FileProbe
from danmaku.domain.ports.media import MediaSource

logger = logging.getLogger(__name__)

# dandanplay hashes the first 16 MiB of a file.
PROBE_BYTES = 16 * 1024 * 1024


def fingerprint_bytes(data: bytes, probe_bytes: int = PROBE_BYTES) -> str:
    return hashlib.md5(data[:probe_bytes]).hexdigest()


class ContentFingerprinter:
    """Partial-content MD5 over the leading probe window of a media file.

    Only ``min(size, PROBE_BYTES)`` bytes are ever requested from the source,
    so large files cost the same as a 16 MiB one.
    """

    def __init__(self, *, probe_bytes: int = PROBE_BYTES) -> None:
        if probe_bytes <= 0:
            raise ValueError("probe_bytes must be positive")
        self._probe_bytes = int(probe_bytes)

    async def probe(self, source: MediaSource) -> FileProbe:
        try:
            size = int(await source.size())
            limit = min(size, self._probe_bytes)
            content = await source.read(limit)
        except (OSError, ValueError) as exc:
            raise ReadError(f"cannot read {source.name!r}: {exc}") from exc

        if size < 0:
            raise ReadError(f"negative size reported for {source.name!r}")

        # A source may hand back more than asked for; the window is fixed.
        content = bytes(content[:limit])
        logger.debug(
            "file_probed",
            extra={"file_name": source.name, "file_size": size, "probe_len": len(content)},
        )
        return FileProbe(content=content, file_name=source.name, file_size=size)

    def digest(self, probe: FileProbe) -> str:
        return fingerprint_bytes(probe.content, self._probe_bytes)

    async def fingerprint(self, source: MediaSource) -> str:
        return self.digest(await self.probe(source))
