"""
Periodic timers for the dashboard.

Two independent timers exist: the UI clock (display strings only) and the
data refresh that regenerates every card's data point. Both run as asyncio
tasks owned by a DashboardScheduler and are cancelled together by stop().
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Callable

from .config import CLOCK_INTERVAL_MS, REFRESH_INTERVAL_MS

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Invoke `callback` every `interval_ms` until stopped.

    The callback may be a plain function or a coroutine function. An error
    raised by one tick is logged and the timer keeps running.
    """

    def __init__(self, interval_ms: int, callback: Callable, name: str = "timer") -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the timer on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_ms / 1000)
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Error in %s tick", self.name)
            self.ticks += 1

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def wait_stopped(self) -> None:
        """Stop and wait for the cancelled task to unwind."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass


class DashboardClock:
    """Display strings for the sidebar clock."""

    def __init__(self) -> None:
        self.time_display = ""
        self.date_display = ""
        self.tick()

    def tick(self, now: datetime | None = None) -> None:
        now = now or datetime.now()
        self.time_display = now.strftime("%I:%M:%S %p")
        self.date_display = now.strftime("%A, %B %d, %Y")


class DashboardScheduler:
    """Owns the clock and data-refresh timers for one dashboard."""

    def __init__(
        self,
        refresh_callback: Callable,
        refresh_interval_ms: int = REFRESH_INTERVAL_MS,
        clock_interval_ms: int = CLOCK_INTERVAL_MS,
    ) -> None:
        self.clock = DashboardClock()
        self.refresh_timer = PeriodicTimer(refresh_interval_ms, refresh_callback, name="data-refresh")
        self.clock_timer = PeriodicTimer(clock_interval_ms, self.clock.tick, name="ui-clock")

    @property
    def running(self) -> bool:
        return self.refresh_timer.running or self.clock_timer.running

    def start(self) -> None:
        self.clock_timer.start()
        self.refresh_timer.start()
        logger.info(
            "Scheduler started (refresh every %d ms, clock every %d ms)",
            self.refresh_timer.interval_ms,
            self.clock_timer.interval_ms,
        )

    def set_refresh_interval(self, interval_ms: int) -> None:
        """Change the refresh cadence, restarting the timer if it runs."""
        was_running = self.refresh_timer.running
        self.refresh_timer.stop()
        self.refresh_timer = PeriodicTimer(interval_ms, self.refresh_timer.callback, name="data-refresh")
        if was_running:
            self.refresh_timer.start()

    async def stop(self) -> None:
        await self.clock_timer.wait_stopped()
        await self.refresh_timer.wait_stopped()
        logger.info("Scheduler stopped")
