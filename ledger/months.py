import calendar
import re
from datetime import datetime
from typing import Callable, Iterable, List

from ledger.domain import Expense

MONTH_KEY_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])")


def month_key(date: str) -> str:
    return date[:7]


def key_for(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def parse_month(key: str) -> tuple[int, int]:
    if not MONTH_KEY_RE.fullmatch(key or ""):
        raise ValueError(f"Month key must look like YYYY-MM, got {key!r}")
    year, month = key.split("-")
    return int(year), int(month)


def shift_month(key: str, delta: int) -> str:
    year, month = parse_month(key)
    index = year * 12 + (month - 1) + delta
    return f"{index // 12}-{index % 12 + 1:02d}"


def month_name(key: str) -> str:
    """'2024-02' -> 'February 2024'."""
    year, month = parse_month(key)
    return f"{calendar.month_name[month]} {year}"


def by_month(key: str) -> Callable[[Expense], bool]:
    def _filter(e: Expense) -> bool:
        return e.date.startswith(key)

    return _filter


def months_with_data(expenses: Iterable[Expense]) -> List[str]:
    return sorted({month_key(e.date) for e in expenses}, reverse=True)


class MonthSelector:
    """Current month window for the view.

    ``clock`` is read at construction (initial month), by ``go_to_today`` and by
    ``is_current_calendar_month`` (live comparison).
    """

    _STEPS = {"prev": -1, "next": 1}

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self.current = key_for(clock())

    def navigate(self, direction: str) -> str:
        if direction not in self._STEPS:
            raise ValueError(f"direction must be 'prev' or 'next', got {direction!r}")
        self.current = shift_month(self.current, self._STEPS[direction])
        return self.current

    def select_month(self, key: str) -> None:
        parse_month(key)
        self.current = key

    def go_to_today(self) -> str:
        self.current = key_for(self._clock())
        return self.current

    def months_with_data(self, expenses: Iterable[Expense]) -> List[str]:
        return months_with_data(expenses)

    def is_current_calendar_month(self, key: str) -> bool:
        return key == key_for(self._clock())
