"""Daily scheduled queue clearing."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from ..session.controller import MatchSetup

logger = logging.getLogger(__name__)


def next_clear_time(now: datetime, hour: int) -> datetime:
    """Next occurrence of `hour`:00 strictly after `now`."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return target


class AutoclearScheduler:
    """
    Background task that clears the queue once a day at a configured hour.

    The task sleeps until the next clear time and only takes the state lock
    when it fires. Errors are logged and the task carries on with the next
    day's run.
    """

    def __init__(
        self,
        setup: MatchSetup,
        hour: int,
        now: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.setup = setup
        self.hour = hour
        self._now = now
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._last_target: datetime | None = None

    def next_target(self) -> datetime:
        """The next clear time, never at or before the one that last fired."""
        now = self._now()
        if self._last_target is not None and self._last_target > now:
            # The sleep can end slightly early by wall-clock time
            now = self._last_target
        return next_clear_time(now, self.hour)

    async def run_once(self) -> bool:
        """Sleep until the next clear time, then clear. Returns whether it cleared."""
        target = self.next_target()
        delay = max((target - self._now()).total_seconds(), 0.0)
        logger.debug("Next autoclear at %s, in %.0f seconds", target, delay)
        await self._sleep(delay)
        self._last_target = target
        return await self.setup.autoclear()

    async def run(self) -> None:
        logger.info("Autoclear started, clearing daily at %02d:00", self.hour)
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Autoclear run failed, retrying next cycle")

    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
