import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .config import REFRESH_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Union[None, Awaitable[None]]]


class MinuteTicker:
    """
    Periodic task that re-runs a callback on a fixed interval until stopped.

    The owner calls start() when its view comes alive and stop() when it goes
    away; nothing keeps running after stop().
    """

    def __init__(self, callback: TickCallback, interval: float = REFRESH_INTERVAL_SECONDS):
        self.callback = callback
        self.interval = interval
        self.ticks = 0
        self._task: Optional["asyncio.Task[Any]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.ticks += 1
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Refresh callback failed on tick %d", self.ticks)
