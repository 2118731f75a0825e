"""Manually advanced clock implementing the timer facility.

Lets tests and replays drive delayed delivery deterministically:

    clock = ManualClock()
    recognizer = MutationRecognizer(pattern, hub, timer=clock)
    ...
    clock.advance(10)
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledCall:
    """A callback due at ``due_ms`` on a ManualClock."""

    due_ms: int
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Timer whose time only moves when ``advance()`` is called."""

    def __init__(self, start_ms: int = 0) -> None:
        self.now_ms = start_ms
        self._queue: list[ScheduledCall] = []
        self._sequence = itertools.count()

    @property
    def pending(self) -> int:
        """Scheduled calls that are neither fired nor cancelled."""
        return sum(1 for call in self._queue if not call.cancelled)

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now_ms + max(delay_ms, 0), next(self._sequence), callback)
        heapq.heappush(self._queue, call)
        return call

    def advance(self, ms: int) -> int:
        """Move time forward, firing due callbacks in due order.

        Callbacks scheduled while advancing fire too if they fall due
        within the window.

        Returns:
            Number of callbacks fired.
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0].due_ms <= target:
            call = heapq.heappop(self._queue)
            self.now_ms = call.due_ms
            if call.cancelled:
                continue
            fired += 1
            call.callback()
        self.now_ms = target
        return fired
