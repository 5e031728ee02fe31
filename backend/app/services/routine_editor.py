from typing import Any, Dict, Iterable, List, Union

from ..core.routine import OutOfRange
from ..models.routine import Step, coerce_minutes

Row = Dict[str, Any]

EDITABLE_FIELDS = ("name", "duration", "url")


class RoutineEditor:
    """
    Draft copy of a routine. Changes stay here until ``save``; the running
    session only sees the saved list.
    """

    def __init__(self, steps: Iterable[Union[Step, Row]] = ()):
        self.rows: List[Row] = []
        self.load(steps)

    def load(self, steps: Iterable[Union[Step, Row]]) -> None:
        self.rows = [self._to_row(step) for step in steps]

    @staticmethod
    def _to_row(step: Union[Step, Row]) -> Row:
        if isinstance(step, Step):
            return step.model_dump()
        if not isinstance(step, dict):
            raise ValueError(f"step must be an object, got {type(step).__name__}")
        return {
            "name": step.get("name", ""),
            "duration": coerce_minutes(step.get("duration")),
            "url": step.get("url"),
        }

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self.rows):
            raise OutOfRange(f"no step at position {index}")

    def add_step(self) -> None:
        self.rows.append({"name": "New Step", "duration": 5.0, "url": None})

    def remove_step(self, index: int) -> None:
        self._check(index)
        del self.rows[index]

    def change_step(self, index: int, field: str, value: Any) -> None:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"unknown step field {field!r}")
        self._check(index)
        if field == "duration":
            value = coerce_minutes(value)
        self.rows[index][field] = value

    def save(self) -> List[Step]:
        return [Step.model_validate(row) for row in self.rows]
