"""
Worked-hours computation for clocked days and planned schedules.

Every caller (week view, day rows, month calendar) goes through this module
so there is exactly one definition of how events turn into hours.
"""

from datetime import datetime, time
from typing import Iterable

from core.config import REST_DAY_HOURS
from models.clocking import ClockEvent, ClockKind, DaySchedule


def parse_wall_clock(value: str | None) -> float | None:
    """
    Convert 'HH:MM' or 'HH:MM:SS' to minutes since midnight.

    Empty or malformed values are "no value" (None), never midnight.
    """
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        return None
    hours, minutes = numbers[0], numbers[1]
    seconds = numbers[2] if len(numbers) == 3 else 0
    if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        return None
    return hours * 60 + minutes + seconds / 60


def reference_minutes(reference: datetime | time | str) -> float:
    """Minutes since midnight of the reference instant used for in-progress days."""
    if isinstance(reference, str):
        minutes = parse_wall_clock(reference)
        if minutes is None:
            raise ValueError(f"Invalid reference time: {reference!r}")
        return minutes
    return reference.hour * 60 + reference.minute + reference.second / 60


def extract_instants(events: Iterable[ClockEvent]) -> dict[ClockKind, float | None]:
    """
    Reduce a day's events to one instant per kind.

    Earliest Entry and latest Exit are authoritative. For Pause and Resume the
    earliest one is used so the result never depends on input order.
    """
    collected: dict[ClockKind, list[float]] = {kind: [] for kind in ClockKind}
    for event in events:
        minutes = parse_wall_clock(event.time)
        if minutes is not None:
            collected[event.kind].append(minutes)

    instants: dict[ClockKind, float | None] = {}
    for kind, values in collected.items():
        if not values:
            instants[kind] = None
        elif kind == ClockKind.EXIT:
            instants[kind] = max(values)
        else:
            instants[kind] = min(values)
    return instants


def in_progress_hours(
    events: Iterable[ClockEvent], reference: datetime | time | str
) -> float | None:
    """
    Hours worked so far on a day that has not been clocked out.

    Returns None when an Exit exists: the day is complete and the caller
    should use the history total instead.
    """
    instants = extract_instants(events)
    entry = instants[ClockKind.ENTRY]
    pause = instants[ClockKind.PAUSE]
    resume = instants[ClockKind.RESUME]

    if instants[ClockKind.EXIT] is not None:
        return None
    if entry is None:
        return 0.0

    now = reference_minutes(reference)
    if pause is None:
        # Entry only (a Resume without a Pause carries no information)
        minutes = now - entry
    elif resume is None:
        # Out for lunch: time since the pause does not count
        minutes = pause - entry
    else:
        minutes = (pause - entry) + (now - resume)

    return max(0.0, minutes / 60)


def completed_hours(
    entry: float | None,
    pause: float | None,
    resume: float | None,
    exit: float | None,
) -> float:
    """
    Total hours of a finished day: (exit - entry) minus the lunch break.

    The break is only deducted when both pause and resume are known.
    Arguments are minutes since midnight.
    """
    if entry is None or exit is None:
        return 0.0
    minutes = exit - entry
    if pause is not None and resume is not None:
        minutes -= resume - pause
    return round(max(0.0, minutes) / 60, 2)


def schedule_hours(day: DaySchedule) -> float:
    """Planned hours for a configured day, from its four time fields."""
    entry = parse_wall_clock(day.entry_time)
    exit = parse_wall_clock(day.exit_time)
    if entry is None or exit is None:
        return 0.0
    minutes = exit - entry
    pause = parse_wall_clock(day.pause_out_time)
    resume = parse_wall_clock(day.pause_in_time)
    if pause is not None and resume is not None:
        minutes -= resume - pause
    return max(0.0, minutes / 60)


def events_hours(
    events: Iterable[ClockEvent], reference: datetime | time | str | None = None
) -> float:
    """Hours for a clocked day, complete or (given a reference) in progress."""
    events = list(events)
    instants = extract_instants(events)
    if instants[ClockKind.EXIT] is None and reference is not None:
        return in_progress_hours(events, reference) or 0.0
    return completed_hours(
        instants[ClockKind.ENTRY],
        instants[ClockKind.PAUSE],
        instants[ClockKind.RESUME],
        instants[ClockKind.EXIT],
    )


def worked_hours(
    events: Iterable[ClockEvent] | None = None,
    schedule: DaySchedule | None = None,
    reference: datetime | time | str | None = None,
    rest: bool = False,
) -> float:
    """
    Entry point for rest, in-progress and planned hours.

    Rest days and holidays short-circuit to REST_DAY_HOURS. Otherwise clocked
    events win over a planned schedule. Clocked-out history days keep the
    total computed by completed_hours at normalization time.
    """
    if rest or (schedule is not None and schedule.is_rest_day):
        return REST_DAY_HOURS
    if events is not None:
        return events_hours(events, reference)
    if schedule is not None:
        return schedule_hours(schedule)
    return 0.0


def format_hours(hours: float) -> str:
    """Format decimal hours as '7h30m'."""
    whole = int(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h{minutes:02d}m"
