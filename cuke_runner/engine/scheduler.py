"""Debounced re-parse bookkeeping: one pending deadline per file key."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class ReparseScheduler:
    """Coalesce bursts of edits to the same file into one re-parse.

    ``schedule`` cancels any pending deadline for the key and arms a new one
    ``delay`` seconds out; ``pop_due`` hands back the keys whose deadline has
    passed. No timers or threads: the caller decides when to poll.
    """

    def __init__(self, delay: float = 1.2, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._deadlines: dict[str, float] = {}

    def schedule(self, key: str) -> None:
        self._deadlines.pop(key, None)
        self._deadlines[key] = self._clock() + self.delay

    def cancel(self, key: str) -> bool:
        return self._deadlines.pop(key, None) is not None

    def pending(self) -> list[str]:
        return list(self._deadlines)

    def pop_due(self, now: float | None = None) -> list[str]:
        now = self._clock() if now is None else now
        due = [k for k, deadline in self._deadlines.items() if deadline <= now]
        for key in due:
            del self._deadlines[key]
        return due

    def clear(self) -> None:
        self._deadlines.clear()
