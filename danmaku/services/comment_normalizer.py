from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from danmaku.domain.entities import WHITE, Comment, DisplayMode, RawCommentEntry

logger = logging.getLogger(__name__)

_MIN_FIELDS = 3

# dandanplay mode codes: 1-3 scrolling, 4 bottom, 5 top.
_DANDANPLAY_MODES: dict[int, DisplayMode] = {
    1: DisplayMode.SCROLL,
    2: DisplayMode.SCROLL,
    3: DisplayMode.SCROLL,
    4: DisplayMode.BOTTOM,
    5: DisplayMode.TOP,
}


class CommentNormalizer:
    """Turns raw ``p``/``m`` records into renderer-ready comments.

    Entries with fewer than three parameter fields, or with a time offset that
    is not a finite non-negative number, are dropped one by one; the rest of
    the batch is kept in input order.

    The raw display-mode code is ignored unless ``honor_display_mode`` is set,
    in which case dandanplay codes are mapped onto :class:`DisplayMode`.
    """

    def __init__(self, *, honor_display_mode: bool = False) -> None:
        self._honor_display_mode = bool(honor_display_mode)

    def normalize(self, raw: Iterable[RawCommentEntry]) -> list[Comment]:
        out: list[Comment] = []
        dropped = 0
        for entry in raw:
            comment = self._normalize_entry(entry)
            if comment is None:
                dropped += 1
                continue
            out.append(comment)

        if dropped:
            logger.debug("comments_dropped", extra={"dropped": dropped, "kept": len(out)})
        return out

    def _normalize_entry(self, entry: RawCommentEntry) -> Comment | None:
        fields = entry.params.split(",")
        if len(fields) < _MIN_FIELDS:
            return None

        time = _parse_time(fields[0])
        if time is None:
            return None

        return Comment(
            text=entry.text,
            time=time,
            color=_parse_color(fields[2]),
            border=False,
            mode=self._mode(fields[1]),
        )

    def _mode(self, raw_mode: str) -> DisplayMode:
        if not self._honor_display_mode:
            return DisplayMode.SCROLL
        try:
            code = int(raw_mode.strip())
        except ValueError:
            return DisplayMode.SCROLL
        return _DANDANPLAY_MODES.get(code, DisplayMode.SCROLL)


def _parse_time(value: str) -> float | None:
    try:
        time = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(time) or time < 0:
        return None
    return time


def _parse_color(value: str) -> int:
    try:
        color = int(value.strip())
    except ValueError:
        return WHITE
    if color < 0 or color > WHITE:
        return WHITE
    return color
