from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, constr, field_validator


def coerce_minutes(value: Any) -> float:
    """Forgiving duration input: non-numeric or non-positive minutes become 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(minutes) or minutes <= 0:
        return 0.0
    return minutes


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: constr(strip_whitespace=True, min_length=1)
    duration: float = 0.0  # minutes, fractional allowed
    url: Optional[str] = None

    @field_validator("duration", mode="before")
    @classmethod
    def _forgive_duration(cls, value: Any) -> float:
        return coerce_minutes(value)

    @field_validator("url", mode="before")
    @classmethod
    def _blank_url(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RoutineView(BaseModel):
    """Render-ready snapshot of one session."""

    step_name: Optional[str] = None
    step_url: Optional[str] = None
    step_number: int
    step_count: int
    is_last_step: bool
    remaining: str
    remaining_sec: int
    is_running: bool
    is_overtime: bool
    total_time: str
    total_overtime: str
    progress: int
    finished: bool
