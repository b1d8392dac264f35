"""
Month calendar of clocked history with weekly totals.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime

from models.clocking import DayHistory
from services.hours import worked_hours


@dataclass
class CalendarDay:
    date: date
    hours: float
    in_progress: bool
    history: DayHistory | None
    holiday_name: str | None
    is_weekend: bool
    is_today: bool


@dataclass
class CalendarWeek:
    days: list[CalendarDay | None]  # 7 cells, Monday first; None outside the month
    total_hours: float


@dataclass
class MonthCalendar:
    year: int
    month: int
    weeks: list[CalendarWeek] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return sum(w.total_hours for w in self.weeks)


def calendar_day_hours(
    day: date, history: DayHistory | None, holiday: str | None, now: datetime
) -> tuple[float, bool]:
    """
    Hours shown for one calendar cell and whether they are still running.

    In-progress figures only make sense for today; other days show the
    history total. Weekday holidays count as a full rest day.
    """
    rest = bool(holiday) and day.weekday() < 5
    if rest or history is None or not history.events:
        return worked_hours(rest=rest), False
    if day == now.date() and history.is_in_progress:
        return worked_hours(events=history.events, reference=now), True
    return history.total_hours, False


def build_month_calendar(
    year: int,
    month: int,
    history_map: dict[date, DayHistory],
    holidays: dict[date, str],
    now: datetime,
) -> MonthCalendar:
    """Monday-first grid of the month with per-day and per-week hours."""
    result = MonthCalendar(year=year, month=month)
    grid = calendar.Calendar(firstweekday=0).monthdatescalendar(year, month)

    for week_dates in grid:
        cells: list[CalendarDay | None] = []
        for day in week_dates:
            if day.month != month:
                cells.append(None)
                continue
            history = history_map.get(day)
            holiday = holidays.get(day)
            hours, running = calendar_day_hours(day, history, holiday, now)
            cells.append(
                CalendarDay(
                    date=day,
                    hours=hours,
                    in_progress=running,
                    history=history,
                    holiday_name=holiday,
                    is_weekend=day.weekday() >= 5,
                    is_today=day == now.date(),
                )
            )
        total = sum(c.hours for c in cells if c is not None)
        result.weeks.append(CalendarWeek(days=cells, total_hours=total))

    return result
