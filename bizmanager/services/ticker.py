"""Periodic elapsed-time display for a running entry.

Client-side display helper for UIs embedding the service (e.g. a desktop or
TUI front end showing the running timer); the HTTP API itself only serves
``GET /timers/current`` snapshots.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from bizmanager.services.timer_service import elapsed_seconds


logger = logging.getLogger(__name__)


class ElapsedTicker:
    """
    Publishes the elapsed seconds of a running entry once per interval.

    The value is recomputed from ``clock() - start_time`` on every tick, so a
    delayed or missed tick never makes the display drift. The ticker owns an
    asyncio task that must be cancelled with ``stop()`` (or by leaving the
    ``async with`` block) when the view goes away.
    """

    def __init__(
        self,
        start_time: datetime,
        on_tick: Callable[[int], None],
        interval: float = 1.0,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.start_time = start_time
        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def current(self) -> int:
        """Elapsed seconds right now."""
        return elapsed_seconds(self.start_time, self.clock())

    def start(self) -> None:
        """Begin ticking; publishes the current value immediately."""
        if self.running:
            return
        self.on_tick(self.current())
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.on_tick(self.current())

    async def stop(self) -> None:
        """Cancel the periodic callback and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Ticker for entry started at %s stopped", self.start_time)

    async def __aenter__(self) -> "ElapsedTicker":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
