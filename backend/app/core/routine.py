"""
Routine state machine: the step sequence and the countdown engine.

Both are frozen values. Every operation returns a new value, so a session
swaps them in one assignment and a tick never observes a half-applied
transition. Time is kept in whole seconds; configured minutes are converted
once, when a step's duration is seeded.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from ..models.routine import RoutineView, Step


class RoutineError(Exception):
    """Base error for routine state transitions."""


class OutOfRange(RoutineError, IndexError):
    """No current step: the sequence is finished or empty."""


def duration_seconds(step: Step) -> int:
    return int(round(step.duration * 60))


def format_clock(seconds: int) -> str:
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(seconds), 60)
    return f"{sign}{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class StepSequence:
    steps: Tuple[Step, ...]
    index: int = 0
    finished: bool = False
    progress: float = 0.0

    @classmethod
    def of(cls, steps: Iterable[Step]) -> "StepSequence":
        return cls(steps=tuple(steps))

    @property
    def is_last(self) -> bool:
        return not self.finished and self.index == len(self.steps) - 1

    def current_step(self) -> Step:
        if self.finished or not self.steps:
            raise OutOfRange("routine is finished" if self.finished else "routine has no steps")
        return self.steps[self.index]

    def current_duration_seconds(self) -> int:
        return duration_seconds(self.current_step())

    def progress_at(self, index: int) -> float:
        """Share of planned time that lies strictly before ``index``, in percent."""
        total = sum(duration_seconds(step) for step in self.steps)
        if total <= 0:
            return 0.0
        done = sum(duration_seconds(step) for step in self.steps[:index])
        return min(done / total * 100, 100.0)

    def advance(self) -> Tuple["StepSequence", Optional[int]]:
        """
        Move to the next step and return its planned seconds.

        Returns ``None`` instead when the last step is left behind; the
        sequence is then finished and stays put on further calls.
        """
        if self.finished:
            return self, None
        nxt = self.index + 1
        if nxt < len(self.steps):
            moved = replace(self, index=nxt, progress=self.progress_at(nxt))
            return moved, moved.current_duration_seconds()
        return replace(self, index=len(self.steps), finished=True, progress=100.0), None

    def replace_all(self, steps: Iterable[Step]) -> "StepSequence":
        return StepSequence.of(steps)


@dataclass(frozen=True)
class CountdownEngine:
    remaining: int = 0
    is_running: bool = False
    total_elapsed: int = 0
    total_overtime: int = 0
    is_overtime: bool = False

    def start(self) -> "CountdownEngine":
        return self if self.is_running else replace(self, is_running=True)

    def pause(self) -> "CountdownEngine":
        return replace(self, is_running=False) if self.is_running else self

    def reset(self, remaining: int) -> "CountdownEngine":
        return replace(self, remaining=int(remaining), is_overtime=False, is_running=True)

    def clear_totals(self) -> "CountdownEngine":
        return replace(self, total_elapsed=0, total_overtime=0)

    def tick(self) -> Tuple["CountdownEngine", bool]:
        """
        Advance one second.

        The flag is True only on the tick that takes ``remaining`` from 0
        to -1, i.e. when the step's planned time has just run out. Ticks
        on a paused engine are ignored.
        """
        if not self.is_running:
            return self, False
        before = self.remaining
        overtime = before <= 0
        ticked = replace(
            self,
            remaining=before - 1,
            total_elapsed=self.total_elapsed + 1,
            total_overtime=self.total_overtime + (1 if overtime else 0),
            is_overtime=self.is_overtime or overtime,
        )
        return ticked, before == 0


def render_view(sequence: StepSequence, engine: CountdownEngine) -> RoutineView:
    step = None if sequence.finished or not sequence.steps else sequence.steps[sequence.index]
    return RoutineView(
        step_name=step.name if step else None,
        step_url=step.url if step else None,
        step_number=min(sequence.index + 1, len(sequence.steps)),
        step_count=len(sequence.steps),
        is_last_step=sequence.is_last,
        remaining=format_clock(engine.remaining),
        remaining_sec=engine.remaining,
        is_running=engine.is_running,
        is_overtime=engine.is_overtime,
        total_time=format_clock(engine.total_elapsed),
        total_overtime=format_clock(engine.total_overtime),
        # half-up, progress is never negative
        progress=int(sequence.progress + 0.5),
        finished=sequence.finished,
    )
