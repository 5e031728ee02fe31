"""
Plain-text routines, one step per line:

    1. Log sleep stats | 3 | https://exist.io/review/
    - Sunsama init | 4

Blank lines and ``#`` comments are skipped.
"""

import logging
import re
from pathlib import Path
from typing import List

from ..core.config import Settings
from ..models.defaults import DEFAULT_STEPS
from ..models.routine import Step

log = logging.getLogger(__name__)


class RoutineParser:
    prefix_pattern = re.compile(r"^\s*(?:\d+[.\)]|[-*])\s*")

    @classmethod
    def parse(cls, raw: str) -> List[Step]:
        steps: List[Step] = []
        for line in raw.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            fields = [part.strip() for part in cls.prefix_pattern.sub("", line).split("|")]
            name = fields[0]
            # a missing duration goes through the same coercion as bad input
            duration = fields[1] if len(fields) > 1 else 0
            url = fields[2] if len(fields) > 2 else None
            steps.append(Step(name=name, duration=duration, url=url))
        return steps


def load_routine(settings: Settings) -> List[Step]:
    if not settings.routine_file:
        return list(DEFAULT_STEPS)
    path = Path(settings.routine_file)
    steps = RoutineParser.parse(path.read_text(encoding="utf-8"))
    log.info(f"📝 Loaded {len(steps)} steps from {path}")
    return steps
