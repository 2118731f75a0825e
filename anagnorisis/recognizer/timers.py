"""Timer facility backed by an asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Callable


class AsyncioTimer:
    """Schedule callbacks on an asyncio event loop.

    Without an explicit loop, each callback goes to the loop running at the
    time it is scheduled, so the timer can be created outside a running loop
    (e.g. at import time of a test module) and reused across loops.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The injected loop, else the currently running one."""
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Run ``callback`` on the loop after ``delay_ms`` milliseconds."""
        return self.loop.call_later(delay_ms / 1000.0, callback)
