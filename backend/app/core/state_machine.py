import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from ..models.routine import RoutineView, Step
from .config import Settings, get_settings
from .routine import CountdownEngine, OutOfRange, StepSequence, render_view
from .timer_manager import TimerManager

log = logging.getLogger(__name__)


class Intent(str, Enum):
    START = "start"
    PAUSE = "pause"
    TOGGLE = "toggle"
    NEXT = "next"
    EDIT = "edit"
    UNKNOWN = "unknown"


class RoutineSession:
    """
    One running routine: wires the step sequence to the countdown engine.

    End of a step only raises the end-of-step signal; moving on is always
    the user's call. Effects are fire-and-forget coroutines supplied by the
    transport.
    """

    def __init__(
        self,
        steps: Iterable[Step],
        on_end_reached: Callable[[], Awaitable[None]],
        on_navigate: Callable[[str], Awaitable[None]],
        on_change: Optional[Callable[[RoutineView], Awaitable[None]]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.end_reached = on_end_reached
        self.navigate = on_navigate
        self.on_change = on_change

        self.sequence = StepSequence.of(steps)
        # seeded but paused until the user starts
        self.engine = CountdownEngine(remaining=self.sequence.current_duration_seconds())
        self.ticker = TimerManager(self.tick, interval=self.settings.tick_interval_sec)

    def view(self) -> RoutineView:
        return render_view(self.sequence, self.engine)

    async def handle(self, intent: Intent, steps: Optional[Iterable[Step]] = None) -> None:
        if intent == Intent.START:
            self._start()
        elif intent == Intent.PAUSE:
            self.engine = self.engine.pause()
        elif intent == Intent.TOGGLE:
            if self.engine.is_running:
                self.engine = self.engine.pause()
            else:
                self._start()
        elif intent == Intent.NEXT:
            await self.next_step()
        elif intent == Intent.EDIT:
            if steps is None:
                raise ValueError("edit needs a list of steps")
            await self.edit(steps)
        else:
            raise ValueError(f"cannot handle intent {intent!r}")

        await self._sync_ticker()
        await self._emit_change()

    async def next_step(self) -> None:
        self.sequence, seconds = self.sequence.advance()
        if seconds is None:
            self.engine = self.engine.pause()
            await self._sync_ticker()
            log.info(
                "🏁 Routine finished: total %ds, overtime %ds",
                self.engine.total_elapsed,
                self.engine.total_overtime,
            )
            return

        self.engine = self.engine.reset(seconds)
        step = self.sequence.current_step()
        log.info("⏭️ Step %d/%d: %s (%ds)", self.sequence.index + 1, len(self.sequence.steps), step.name, seconds)
        if step.url:
            await self.navigate(step.url)

    async def edit(self, steps: Iterable[Step]) -> None:
        self.sequence = self.sequence.replace_all(steps)
        if self.settings.reset_totals_on_edit:
            self.engine = self.engine.clear_totals()
        try:
            seconds = self.sequence.current_duration_seconds()
        except OutOfRange:
            self.engine = self.engine.pause()
            await self._sync_ticker()
            raise
        self.engine = self.engine.reset(seconds)
        log.info("✏️ Routine edited: %d steps", len(self.sequence.steps))

    async def tick(self) -> None:
        self.engine, ended = self.engine.tick()
        try:
            if ended:
                log.info("⏰ Time is up for %s", self.sequence.current_step().name)
                await self.end_reached()
            await self._emit_change()
        except Exception:
            # the ticker stops on a failed tick; keep the engine in step with it
            self.engine = self.engine.pause()
            raise

    def _start(self) -> None:
        if self.sequence.finished or not self.sequence.steps:
            log.info("Nothing left to time, start ignored")
            return
        self.engine = self.engine.start()

    async def close(self) -> None:
        await self.ticker.disarm()

    async def _sync_ticker(self) -> None:
        if self.engine.is_running:
            self.ticker.arm()
        else:
            await self.ticker.disarm()

    async def _emit_change(self) -> None:
        if self.on_change:
            await self.on_change(self.view())
