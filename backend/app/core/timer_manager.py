import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

log = logging.getLogger(__name__)


class TimerManager:
    """
    Periodic tick source for one session.

    Armed only while the countdown runs; ``disarm`` cancels the pending
    task so no tick is delivered after pause or teardown.
    """

    def __init__(self, on_tick: Callable[[], Awaitable[None]], interval: float = 1.0):
        self.on_tick = on_tick
        self.interval = interval
        self.task: Optional[asyncio.Task] = None

    @property
    def armed(self) -> bool:
        return self.task is not None and not self.task.done()

    def arm(self) -> None:
        if self.armed:
            return
        self.task = asyncio.create_task(self._run())
        log.debug("Ticker armed, every %.2fs", self.interval)

    async def disarm(self) -> None:
        task, self.task = self.task, None
        if task is None:
            return
        task.cancel()
        if task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task
        log.debug("Ticker disarmed")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        # ticks follow a fixed schedule, handler time is not added on top
        deadline = loop.time()
        while True:
            deadline += self.interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            try:
                await self.on_tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("Tick handler failed, ticker stopped")
                return
