#!/usr/bin/env python3
"""
Submit the default clockings of a week to Intratime.

Uses the session stored by the API login. Days that already have clockings,
rest days and bank holidays are skipped.

Usage:
    python src/scripts/submit_week.py --date 2026-03-02
    python src/scripts/submit_week.py --dry-run
"""

import argparse
import asyncio
import sys
import traceback
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import record_submission
from core.intratime_client import IntratimeClient
from core.session import SessionStore
from core.validation import validate_schedule
from services.history import fetch_history, history_by_date
from services.hours import format_hours
from services.week import (
    build_week,
    holidays_for_week,
    plan_submission,
    submit_events,
    summarize_week,
    week_start,
)


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_week_monday(as_of_date_str: str | None) -> date:
    """
    Monday of the week to submit.

    Args:
        as_of_date_str: Optional date string (YYYY-MM-DD). Uses today if None.
    """
    if as_of_date_str:
        as_of = datetime.strptime(as_of_date_str, "%Y-%m-%d").date()
    else:
        as_of = date.today()
    return week_start(as_of)


# =============================================================================
# MAIN
# =============================================================================


async def main(as_of_date_str: str | None = None, dry_run: bool = False):
    """Main entry point."""
    try:
        # 1. Load session
        store = SessionStore(DB_PATH)
        session = store.load()
        if session is None:
            print("No active session. Log in through the API first.")
            return

        monday = get_week_monday(as_of_date_str)
        print(f"Week of {monday} for {session.full_name or session.username}")

        # 2. Build and validate the default week
        days = build_week(monday)
        validation = validate_schedule(days)
        if not validation.ok:
            print("Schedule has errors:")
            for message in validation.messages:
                print(f"  - {message}")
            return

        holidays = holidays_for_week(monday)
        for day, name in holidays.items():
            print(f"  {day} is a bank holiday ({name})")

        async with IntratimeClient() as client:
            # 3. Fetch what is already clocked
            print("\nFetching existing clockings...")
            history = await fetch_history(client, session, monday, days[-1].date)
            history_map = history_by_date(history)
            print(f"  Found clockings on {len(history_map)} day(s)")

            # 4. Plan pending events
            events = plan_submission(days, history_map, holidays)
            print(f"\nPending clockings: {len(events)}")
            for event in events:
                print(f"  {event.date} {event.kind.label} {event.time}")

            if dry_run or not events:
                summary = summarize_week(
                    days, history_map, holidays, session.weekly_quota, datetime.now()
                )
            else:
                # 5. Submit and record
                print("\nSubmitting...")
                await submit_events(
                    client,
                    session,
                    events,
                    on_submitted=lambda event, ts: record_submission(event, ts, DB_PATH),
                )
                refreshed = await fetch_history(client, session, monday, days[-1].date)
                summary = summarize_week(
                    days, history_by_date(refreshed), holidays, session.weekly_quota, datetime.now()
                )

        print(
            f"\nWeek total: {format_hours(summary.total_hours)} "
            f"of {format_hours(summary.quota)} ({summary.difference:+.2f}h)"
        )
        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Submit a week of Intratime clockings")
    parser.add_argument(
        "--date",
        help="Any date of the week to submit (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show pending clockings without submitting them.",
    )
    args = parser.parse_args()

    asyncio.run(main(args.date, args.dry_run))
