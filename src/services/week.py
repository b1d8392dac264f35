"""
Weekly reconciliation: planned week vs. clocked history.

Builds the Monday-Friday schedule, overlays what the vendor already has,
totals the week against the quota and decides what is left to submit.
"""

import asyncio
import random
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable

from core.config import (
    DEFAULT_SCHEDULE,
    FRIDAY_SCHEDULE,
    SUBMIT_DELAY_SECONDS,
    SUBMIT_JITTER_MINUTES,
    WEEKDAY_LABELS,
)
from core.errors import FetchError, SubmissionError
from core.intratime_client import IntratimeClient
from core.session import Session
from core.validation import ScheduleValidation, validate_schedule
from models.clocking import ClockEvent, ClockKind, DayHistory, DaySchedule
from services.history import fetch_history, history_by_date
from services.holidays import holidays_in_range
from services.hours import parse_wall_clock, worked_hours

EDITABLE_FIELDS = {
    "entry_time",
    "pause_out_time",
    "pause_in_time",
    "exit_time",
    "lunch_enabled",
    "is_rest_day",
}


# =============================================================================
# WEEK CONSTRUCTION
# =============================================================================


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def recompute(day: DaySchedule) -> DaySchedule:
    """Refresh computed_hours after an edit."""
    return day.with_changes(computed_hours=worked_hours(schedule=day))


def default_schedule(day: date) -> DaySchedule:
    """Default plan for a weekday: long days Mon-Thu, short Friday without lunch."""
    is_friday = day.weekday() == 4
    times = FRIDAY_SCHEDULE if is_friday else DEFAULT_SCHEDULE
    schedule = DaySchedule(
        weekday_label=WEEKDAY_LABELS[day.weekday()],
        date=day,
        lunch_enabled=not is_friday,
        **times,
    )
    return recompute(schedule)


def apply_edits(day: DaySchedule, edits: dict) -> DaySchedule:
    """Apply user edits to a day; unknown keys are ignored."""
    changes = {k: v for k, v in edits.items() if k in EDITABLE_FIELDS}
    for name in ("entry_time", "pause_out_time", "pause_in_time", "exit_time"):
        if name in changes and changes[name] is None:
            changes[name] = ""
    return recompute(day.with_changes(**changes))


def build_week(monday: date, edits: dict[date, dict] | None = None) -> list[DaySchedule]:
    """Five default days starting at monday, with per-date edits applied."""
    monday = week_start(monday)
    edits = edits or {}
    days = []
    for offset in range(5):
        day = default_schedule(monday + timedelta(days=offset))
        if day.date in edits:
            day = apply_edits(day, edits[day.date])
        days.append(day)
    return days


def holidays_for_week(monday: date) -> dict[date, str]:
    """Holiday names falling on the Monday-Friday range."""
    monday = week_start(monday)
    return {h.date: h.name for h in holidays_in_range(monday, monday + timedelta(days=4))}


# =============================================================================
# RECONCILIATION
# =============================================================================


@dataclass
class DayStatus:
    """One weekday of the week view."""

    schedule: DaySchedule
    history: DayHistory | None
    holiday_name: str | None
    hours: float
    state: str  # holiday | rest | in_progress | completed | planned


@dataclass
class WeekSummary:
    start: date
    days: list[DayStatus]
    total_hours: float
    quota: float
    completed: bool
    validation: ScheduleValidation = field(default_factory=ScheduleValidation)

    @property
    def difference(self) -> float:
        return self.total_hours - self.quota


def day_state(day: DaySchedule, history: DayHistory | None, is_holiday: bool) -> str:
    if is_holiday:
        return "holiday"
    if day.is_rest_day:
        return "rest"
    if history is not None and history.events:
        return "completed" if history.is_complete else "in_progress"
    return "planned"


def effective_hours(
    day: DaySchedule,
    history: DayHistory | None,
    is_holiday: bool,
    now: datetime,
) -> float:
    """
    Hours a weekday contributes to the week total.

    Clocked-out days use the total normalized from the vendor records, which
    keeps their seconds; everything else goes through worked_hours.
    """
    rest = is_holiday or day.is_rest_day
    if not rest and history is not None and history.events:
        if history.is_complete:
            return history.total_hours
        return worked_hours(events=history.events, reference=now)
    return worked_hours(schedule=day, rest=rest)


def is_week_completed(
    days: list[DaySchedule], history_map: dict[date, DayHistory], holidays: dict[date, str]
) -> bool:
    """True when every day is a holiday, a rest day or has a clocked exit."""
    for day in days:
        if day.date in holidays or day.is_rest_day:
            continue
        history = history_map.get(day.date)
        if history is None or not history.is_complete:
            return False
    return True


def summarize_week(
    days: list[DaySchedule],
    history_map: dict[date, DayHistory],
    holidays: dict[date, str],
    quota: float,
    now: datetime,
) -> WeekSummary:
    statuses = []
    for day in days:
        history = history_map.get(day.date)
        is_holiday = day.date in holidays
        statuses.append(
            DayStatus(
                schedule=day,
                history=history,
                holiday_name=holidays.get(day.date),
                hours=effective_hours(day, history, is_holiday, now),
                state=day_state(day, history, is_holiday),
            )
        )

    return WeekSummary(
        start=days[0].date if days else week_start(now.date()),
        days=statuses,
        total_hours=sum(s.hours for s in statuses),
        quota=quota,
        completed=is_week_completed(days, history_map, holidays),
        validation=validate_schedule(days),
    )


def plan_submission(
    days: list[DaySchedule],
    history_map: dict[date, DayHistory],
    holidays: dict[date, str],
) -> list[ClockEvent]:
    """
    Events still to be sent for the week.

    A day is skipped entirely if it is a rest day, a holiday, or already has
    any clocking at all, so re-submitting a week never duplicates a day.
    """
    events = []
    for day in days:
        if day.is_rest_day or day.date in holidays:
            continue
        history = history_map.get(day.date)
        if history is not None and history.events:
            continue

        for kind in (ClockKind.ENTRY, ClockKind.PAUSE, ClockKind.RESUME, ClockKind.EXIT):
            if kind in (ClockKind.PAUSE, ClockKind.RESUME) and not day.lunch_enabled:
                continue
            value = day.time_for(kind)
            if value:
                events.append(ClockEvent(date=day.date, kind=kind, time=value))
    return events


# =============================================================================
# REMOTE CALLS
# =============================================================================


async def load_week_history(
    client: IntratimeClient, session: Session | None, monday: date
) -> dict[date, DayHistory]:
    """
    History overlay for the Monday-Friday range.

    A failed fetch degrades to an empty overlay so the week can still be
    shown from configuration alone.
    """
    monday = week_start(monday)
    try:
        history = await fetch_history(client, session, monday, monday + timedelta(days=4))
    except FetchError as e:
        print(f"Could not load history for week of {monday}: {e}")
        return {}
    return history_by_date(history)


def event_timestamp(
    event: ClockEvent,
    jitter_minutes: int = 0,
    rng: random.Random | None = None,
    not_before: datetime | None = None,
) -> datetime:
    """
    Timestamp to send for a planned event.

    With jitter, the time is moved by up to +/- jitter_minutes and given
    random seconds so submitted clockings don't look machine-made. The
    result always stays on the event's own day and, when not_before is
    given, strictly after it.
    """
    minutes = parse_wall_clock(event.time)
    if minutes is None:
        raise ValueError(f"Event for {event.date} has no valid time: {event.time!r}")
    base = datetime.combine(event.date, time.min) + timedelta(minutes=minutes)
    moment = base
    if jitter_minutes > 0:
        rng = rng or random.Random()
        offset = rng.randint(-jitter_minutes, jitter_minutes)
        seconds = rng.randint(0, 59)
        moment = base.replace(second=0) + timedelta(minutes=offset, seconds=seconds)

    earliest = datetime.combine(event.date, time.min)
    if not_before is not None:
        earliest = max(earliest, not_before + timedelta(seconds=1))
    latest = datetime.combine(event.date, time(23, 59, 59))
    return min(max(moment, earliest), latest)


async def submit_events(
    client: IntratimeClient,
    session: Session | None,
    events: list[ClockEvent],
    delay: float | None = None,
    jitter_minutes: int | None = None,
    rng: random.Random | None = None,
    sleep: Callable[[float], Awaitable] = asyncio.sleep,
    on_submitted: Callable[[ClockEvent, datetime], None] | None = None,
) -> list[tuple[ClockEvent, datetime]]:
    """
    Send events one at a time, in order, with a fixed pause between calls.

    No retries. The first failure stops the sequence and raises
    SubmissionError; events already accepted stay submitted.
    """
    delay = SUBMIT_DELAY_SECONDS if delay is None else delay
    jitter_minutes = SUBMIT_JITTER_MINUTES if jitter_minutes is None else jitter_minutes
    rng = rng or random.Random()
    submitted: list[tuple[ClockEvent, datetime]] = []
    # Last timestamp sent per day, so jitter never reorders a day's clockings
    last_sent: dict[date, datetime] = {}
    for index, event in enumerate(events):
        if index > 0 and delay > 0:
            await sleep(delay)

        timestamp = event_timestamp(event, jitter_minutes, rng, last_sent.get(event.date))
        try:
            await client.submit_clocking(session, event.kind, timestamp)
        except FetchError as e:
            raise SubmissionError(
                f"Error submitting {event.kind.label} for {event.date}: {e}",
                submitted=submitted,
                failed=event,
                status_code=e.status_code,
            ) from e

        submitted.append((event, timestamp))
        last_sent[event.date] = timestamp
        print(f"  [{len(submitted)}/{len(events)}] {event.date} {event.kind.label} {timestamp:%H:%M:%S}")
        if on_submitted is not None:
            on_submitted(event, timestamp)

    return submitted
