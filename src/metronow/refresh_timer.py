"""Process-wide periodic refresh timer."""

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class TimerState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class RefreshTimer:
    """
    Calls an async callback every `interval` seconds on a single task.

    start() and stop() are synchronous, so checking the state and creating or
    cancelling the task happen without yielding to the event loop.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], interval: float):
        """
        Args:
            callback: Coroutine function run on every tick.
            interval: Seconds between ticks; the first tick fires after one interval.
        """
        self.callback = callback
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._state = TimerState.NOT_STARTED

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is TimerState.RUNNING

    def start(self) -> bool:
        """
        Start ticking unless already running.

        Returns:
            True if a new task was created.
        """
        if self._task is not None and not self._task.done():
            return False

        self._task = asyncio.get_running_loop().create_task(self._run())
        self._state = TimerState.RUNNING
        logger.info(f"Started refresh timer ({self.interval}s interval)")
        return True

    def stop(self) -> None:
        """Cancel the running task, if any, and clear the handle."""
        if self._task is None:
            return

        self._task.cancel()
        self._task = None
        self._state = TimerState.STOPPED
        logger.info("Stopped refresh timer")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.callback()
            except Exception as e:
                logger.error(f"Error in refresh tick (will retry): {e}", exc_info=True)
