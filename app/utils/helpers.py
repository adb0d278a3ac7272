"""
Shared Utility Functions

Message sizing for Slack delivery and preview throttling.
"""

import time
from typing import Callable, List

# Slack rejects text much beyond 4000 chars; stay under it
SLACK_MAX_LENGTH = 3900
PREVIEW_MAX_LENGTH = 3000
ELLIPSIS = "..."


def truncate_for_slack(text: str, max_length: int = PREVIEW_MAX_LENGTH) -> str:
    """
    Hard-cut a live preview to max_length characters, ellipsis included.

    No attempt is made to respect word or line boundaries.
    """
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(ELLIPSIS), 0)] + ELLIPSIS


def split_for_slack(text: str, max_length: int = SLACK_MAX_LENGTH) -> List[str]:
    """
    Split text into chunks of at most max_length characters.

    Each cut goes at the last newline before the limit, else the last space,
    as long as that break is not in the first half of the chunk; otherwise
    the text is hard-cut at the limit. Leading whitespace of the remainder is
    dropped before the next chunk.

    Args:
        text: Full message text
        max_length: Maximum characters per chunk

    Returns:
        Non-empty chunks in order; empty input gives an empty list
    """
    if max_length < 2:
        raise ValueError("max_length must be at least 2")

    chunks: List[str] = []
    remaining = text
    min_cut = max_length // 2

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        cut = remaining.rfind("\n", 0, max_length)
        if cut < min_cut:
            cut = remaining.rfind(" ", 0, max_length)
        if cut < min_cut:
            cut = max_length

        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip()

    return chunks


class StreamThrottle:
    """
    Rate limiter for live preview updates.

    ready() returns True at most once per interval seconds.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._last: float | None = None

    def ready(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True
