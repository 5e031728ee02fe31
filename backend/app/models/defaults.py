from typing import List

from .routine import Step

DEFAULT_STEPS: List[Step] = [
    Step(name="Read Mnestic", duration=1),
    Step(name="Look at RingConn", duration=1),
    Step(name="Log sleep stats Exist", duration=3, url="https://exist.io/review/"),
    Step(name="Sunsama init", duration=4),
    Step(
        name="Look at calendar",
        duration=1,
        url="https://calendar.google.com/calendar/u/0/r",
    ),
    Step(
        name="Look at todo list",
        duration=2,
        url="https://app.todoist.com/app/today",
    ),
    Step(
        name="Review last day on Intend",
        duration=10,
        url="https://intend.do/aelerinya/now",
    ),
    Step(name="Do one of the rationality techniques in the deck", duration=5),
    Step(
        name="Set intention for the day on Intend",
        duration=4,
        url="https://intend.do/aelerinya/today",
    ),
    Step(name="Sunsama finish plan", duration=3),
]
