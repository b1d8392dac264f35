"""
Bank holiday lookup backed by a static JSON data file.
"""

import json
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path

from core.config import HOLIDAYS_PATH


@dataclass(frozen=True)
class BankHoliday:
    date: date
    name: str


@lru_cache(maxsize=None)
def load_holidays(path: Path = HOLIDAYS_PATH) -> tuple[BankHoliday, ...]:
    """Read the holiday file once; a missing file means no holidays."""
    if not path.exists():
        print(f"Holiday file not found at {path}, assuming no holidays")
        return ()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    holidays = [
        BankHoliday(date=date.fromisoformat(h["date"]), name=h["name"])
        for h in data.get("holidays", [])
    ]
    return tuple(sorted(holidays, key=lambda h: h.date))


def get_holidays() -> tuple[BankHoliday, ...]:
    return load_holidays(HOLIDAYS_PATH)


def is_holiday(day: date) -> bool:
    return any(h.date == day for h in get_holidays())


def holiday_name(day: date) -> str | None:
    for h in get_holidays():
        if h.date == day:
            return h.name
    return None


def holidays_in_range(start: date, end: date) -> list[BankHoliday]:
    """Holidays between start and end, both inclusive."""
    return [h for h in get_holidays() if start <= h.date <= end]
