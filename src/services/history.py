"""
Normalization of raw Intratime clocking records into per-day history.
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, time

from core.intratime_client import TIMESTAMP_FORMAT, IntratimeClient
from core.session import Session
from models.clocking import ClockEvent, ClockKind, DayHistory
from services.hours import completed_hours


def parse_record(record: dict) -> tuple[datetime, ClockKind] | None:
    """Timestamp and kind of a vendor record, or None if it can't be used."""
    try:
        timestamp = datetime.strptime(record["INOUT_DATE"], TIMESTAMP_FORMAT)
        kind = ClockKind.from_code(int(record["INOUT_TYPE"]))
    except (KeyError, TypeError, ValueError):
        return None
    return timestamp, kind


def _minutes(moment: datetime | None) -> float | None:
    if moment is None:
        return None
    return moment.hour * 60 + moment.minute + moment.second / 60


def normalize_day(day: date, records: list[tuple[datetime, ClockKind, dict]]) -> DayHistory:
    """
    Build one day's history from its parsed records.

    Instants: earliest Entry, latest Exit, earliest Pause, earliest Resume.
    Events are kept one per record, in Entry/Pause/Resume/Exit order.
    """
    records = sorted(records, key=lambda r: r[0])

    entry = exit = pause = resume = None
    for timestamp, kind, _ in records:
        if kind == ClockKind.ENTRY and entry is None:
            entry = timestamp
        elif kind == ClockKind.PAUSE and pause is None:
            pause = timestamp
        elif kind == ClockKind.RESUME and resume is None:
            resume = timestamp
        elif kind == ClockKind.EXIT:
            exit = timestamp

    total = completed_hours(_minutes(entry), _minutes(pause), _minutes(resume), _minutes(exit))

    events = [
        ClockEvent(
            date=day,
            kind=kind,
            time=timestamp.strftime("%H:%M"),
            source_id=str(raw["INOUT_ID"]) if raw.get("INOUT_ID") is not None else None,
        )
        for timestamp, kind, raw in records
    ]
    # Stable sort keeps chronological order within a kind
    events.sort(key=lambda e: e.kind.order)

    return DayHistory(date=day, events=tuple(events), total_hours=total)


def normalize_clockings(records: list[dict]) -> list[DayHistory]:
    """
    Group raw vendor records by calendar day and normalize each day.

    Records with an unknown type or unparsable date are skipped.
    Returns days sorted by date, most recent first.
    """
    by_day: dict[date, list[tuple[datetime, ClockKind, dict]]] = defaultdict(list)
    skipped = 0
    for record in records:
        parsed = parse_record(record)
        if parsed is None:
            skipped += 1
            continue
        timestamp, kind = parsed
        by_day[timestamp.date()].append((timestamp, kind, record))

    if skipped:
        print(f"Skipped {skipped} unreadable clocking record(s)")

    history = [normalize_day(day, day_records) for day, day_records in by_day.items()]
    history.sort(key=lambda h: h.date, reverse=True)
    return history


def history_by_date(history: list[DayHistory]) -> dict[date, DayHistory]:
    """Index history by date, keeping only days that have events."""
    return {h.date: h for h in history if h.events}


def month_range(month: str) -> tuple[date, date]:
    """First and last day of a 'YYYY-MM' month."""
    year, month_num = (int(part) for part in month.split("-"))
    last_day = calendar.monthrange(year, month_num)[1]
    return date(year, month_num, 1), date(year, month_num, last_day)


async def fetch_history(
    client: IntratimeClient, session: Session | None, start: date, end: date
) -> list[DayHistory]:
    """Fetch and normalize all clockings between two dates (inclusive)."""
    records = await client.fetch_clockings(
        session,
        datetime.combine(start, time.min),
        datetime.combine(end, time(23, 59, 59)),
    )
    return normalize_clockings(records)


async def fetch_month_history(
    client: IntratimeClient, session: Session | None, month: str
) -> list[DayHistory]:
    """Fetch and normalize a whole 'YYYY-MM' month."""
    start, end = month_range(month)
    return await fetch_history(client, session, start, end)
