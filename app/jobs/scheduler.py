"""
Periodic Scheduler

Runs one async unit of work on a fixed interval inside its own asyncio task:
work, then sleep, then work again. A failing tick is logged and the loop
carries on at the next interval. Cancelling the task ends the loop cleanly,
whether it is sleeping or in the middle of a tick.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Work = Callable[[], Awaitable[Any]]


class PeriodicScheduler:
    def __init__(self, name: str, interval_seconds: float, work: Work):
        self.name = name
        self.interval_seconds = interval_seconds
        self._work = work
        self._task: Optional[asyncio.Task] = None

        self.ticks = 0
        self.failures = 0
        self.last_started_at: Optional[datetime] = None
        self.last_finished_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.is_running:
            return self._task
        self._task = asyncio.create_task(self.run(), name=f"scheduler:{self.name}")
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to wind down."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        logger.info(
            "%s scheduler started; interval: %ss.", self.name, self.interval_seconds
        )
        while True:
            if not await self._tick():
                break
            try:
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                logger.info(
                    "%s scheduler cancellation requested during delay.", self.name
                )
                break
        logger.info("%s scheduler stopped.", self.name)

    async def _tick(self) -> bool:
        """Run the work once; False means the loop was cancelled."""
        self.ticks += 1
        self.last_started_at = datetime.utcnow()
        try:
            await self._work()
            self.last_error = None
        except asyncio.CancelledError:
            logger.info("%s scheduler cancellation requested.", self.name)
            return False
        except Exception as exc:
            self.failures += 1
            self.last_error = str(exc)
            logger.exception("%s tick failed.", self.name)
        finally:
            self.last_finished_at = datetime.utcnow()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "running": self.is_running,
            "intervalSeconds": self.interval_seconds,
            "ticks": self.ticks,
            "failures": self.failures,
            "lastStartedAt": self.last_started_at.isoformat() if self.last_started_at else None,
            "lastFinishedAt": self.last_finished_at.isoformat() if self.last_finished_at else None,
            "lastError": self.last_error,
        }
