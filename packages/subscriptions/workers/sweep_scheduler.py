"""
Owned scheduler handle for the periodic subscription sweep.

Runs one tick shortly after start, then one per interval, until stopped.
`trigger()` wakes the loop for an immediate tick. The sleep function is
injectable so tests can drive ticks without waiting on the clock.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from common.core.config import settings
from common.core.telemetry import get_logger

logger = get_logger(__name__)


class SweepScheduler:
    """Start/stop handle around a background sweep loop."""

    def __init__(
        self,
        run_tick: Callable[[], Awaitable[Any]],
        interval: Optional[float] = None,
        startup_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "subscription-sweep",
    ):
        self.run_tick = run_tick
        self.interval = (
            interval if interval is not None else settings.sweep_interval_seconds
        )
        self.startup_delay = (
            startup_delay
            if startup_delay is not None
            else settings.sweep_startup_delay_seconds
        )
        self.name = name
        self.ticks = 0
        self._sleep = sleep
        self._wake = asyncio.Event()
        self._stopping = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            logger.warning(f"Scheduler {self.name} is already running")
            return
        self._stopping = False
        self._wake.clear()
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info(
            f"Scheduler {self.name} started",
            extra={"interval": self.interval, "startup_delay": self.startup_delay},
        )

    async def stop(self) -> None:
        """Stop the loop and wait for an in-flight tick to finish."""
        if self._task is None:
            return
        self._stopping = True
        self._wake.set()
        try:
            await self._task
        finally:
            self._task = None
        logger.info(f"Scheduler {self.name} stopped", extra={"ticks": self.ticks})

    def trigger(self) -> None:
        """Run a tick now instead of waiting for the interval."""
        self._wake.set()

    async def _wait(self, timeout: float) -> None:
        """Sleep for `timeout` or until woken, whichever comes first."""
        sleeper = asyncio.ensure_future(self._sleep(timeout))
        waker = asyncio.ensure_future(self._wake.wait())
        try:
            await asyncio.wait(
                {sleeper, waker}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (sleeper, waker):
                if not task.done():
                    task.cancel()
            self._wake.clear()

    async def _tick(self) -> None:
        self.ticks += 1
        try:
            await self.run_tick()
        except Exception as e:
            logger.error(
                f"Scheduler {self.name} tick failed: {e}",
                exc_info=True,
                extra={"tick": self.ticks},
            )

    async def _loop(self) -> None:
        delay = self.startup_delay
        while not self._stopping:
            await self._wait(delay)
            if self._stopping:
                break
            await self._tick()
            delay = self.interval

    async def wait(self) -> None:
        """Block until the loop exits."""
        if self._task is not None:
            await asyncio.shield(self._task)
