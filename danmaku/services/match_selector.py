from __future__ import annotations

from collections.abc import Sequence

from danmaku.core.errors import NoMatchFoundError
from danmaku.domain.entities import MatchCandidate


def select_match(matches: Sequence[MatchCandidate]) -> MatchCandidate:
    """Top match wins: the service's ordering is authoritative."""
    if not matches:
        raise NoMatchFoundError("empty candidate list")
    return matches[0]
