"""Week view, validation and bulk submission endpoints."""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies import (
    get_intratime_client,
    get_now,
    get_session_store,
    require_session,
    verify_api_key,
)
from api.errors import api_error, current_log
from api.models.requests import WeekRequest
from api.models.responses import (
    ErrorCodes,
    SubmitResponse,
    SubmittedEventResponse,
    ValidationResponse,
    WeekResponse,
)
from core.database import record_submission
from core.errors import FetchError, SubmissionError
from core.intratime_client import format_timestamp, IntratimeClient
from core.session import Session, SessionStore
from core.validation import validate_schedule
from services.history import fetch_history, history_by_date
from services.week import (
    build_week,
    holidays_for_week,
    load_week_history,
    plan_submission,
    submit_events,
    summarize_week,
    week_start,
)

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.get("/week", response_model=WeekResponse)
async def get_week(
    request: Request,
    day: Annotated[date | None, Query(alias="date", description="Any date of the week")] = None,
    session: Session = Depends(require_session),
    client: IntratimeClient = Depends(get_intratime_client),
    now: datetime = Depends(get_now),
):
    """
    Default week with the vendor history overlaid.

    If history can't be fetched the week is computed from configuration only.
    """
    monday = week_start(day or now.date())
    days = build_week(monday)
    history_map = await load_week_history(client, session, monday)
    summary = summarize_week(
        days, history_map, holidays_for_week(monday), session.weekly_quota, now
    )

    log = current_log(request)
    if log is not None:
        log.week_start = monday.isoformat()
        log.total_hours = round(summary.total_hours, 2)
    return WeekResponse.from_summary(summary)


@router.post("/week/validate", response_model=ValidationResponse)
async def validate_week(body: WeekRequest):
    """Validate an edited week without touching the vendor."""
    days = build_week(body.date, body.edits())
    return ValidationResponse.from_validation(validate_schedule(days))


@router.post("/week/summary", response_model=WeekResponse)
async def summarize_edited_week(
    request: Request,
    body: WeekRequest,
    session: Session = Depends(require_session),
    client: IntratimeClient = Depends(get_intratime_client),
    now: datetime = Depends(get_now),
):
    """Week totals for an edited (not yet submitted) week."""
    monday = week_start(body.date)
    days = build_week(monday, body.edits())
    history_map = await load_week_history(client, session, monday)
    summary = summarize_week(
        days, history_map, holidays_for_week(monday), session.weekly_quota, now
    )

    log = current_log(request)
    if log is not None:
        log.week_start = monday.isoformat()
        log.total_hours = round(summary.total_hours, 2)
    return WeekResponse.from_summary(summary)


@router.post("/week/submit", response_model=SubmitResponse)
async def submit_week(
    request: Request,
    body: WeekRequest,
    session: Session = Depends(require_session),
    client: IntratimeClient = Depends(get_intratime_client),
    store: SessionStore = Depends(get_session_store),
    now: datetime = Depends(get_now),
):
    """
    Submit every pending clocking of the week.

    Days that already have any clocking, rest days and holidays are skipped.
    Validation errors block the whole submission.
    """
    monday = week_start(body.date)
    log = current_log(request)
    if log is not None:
        log.week_start = monday.isoformat()

    days = build_week(monday, body.edits())
    validation = validate_schedule(days)
    if not validation.ok:
        raise api_error(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Week schedule has errors",
            ErrorCodes.VALIDATION_ERROR,
            validation.messages,
        )

    holidays = holidays_for_week(monday)
    # Unlike the week view, submitting without knowing the history could
    # duplicate clockings, so a fetch failure stops here.
    try:
        history = await fetch_history(client, session, monday, days[-1].date)
    except FetchError as e:
        raise api_error(
            request, status.HTTP_502_BAD_GATEWAY, str(e), ErrorCodes.UPSTREAM_ERROR
        )
    history_map = history_by_date(history)

    events = plan_submission(days, history_map, holidays)
    print(f"Submitting {len(events)} clocking(s) for week of {monday}")

    def on_submitted(event, timestamp):
        record_submission(event, timestamp, store.db_path)
        if log is not None:
            log.details.append(
                ("event_submitted", f"{event.date} {event.kind.key} {format_timestamp(timestamp)}")
            )

    try:
        submitted = await submit_events(client, session, events, on_submitted=on_submitted)
    except SubmissionError as e:
        if log is not None:
            log.events_submitted = len(e.submitted)
        raise api_error(
            request,
            status.HTTP_502_BAD_GATEWAY,
            str(e),
            ErrorCodes.SUBMISSION_ABORTED,
            [f"{len(e.submitted)} of {len(events)} clocking(s) were submitted before the failure"],
            detail_type="warning",
        )

    refreshed = await load_week_history(client, session, monday)
    summary = summarize_week(days, refreshed, holidays, session.weekly_quota, now)

    if log is not None:
        log.events_submitted = len(submitted)
        log.total_hours = round(summary.total_hours, 2)

    return SubmitResponse(
        submitted=[
            SubmittedEventResponse(
                date=event.date,
                kind=event.kind.key,
                planned_time=event.time,
                timestamp=format_timestamp(timestamp),
            )
            for event, timestamp in submitted
        ],
        week=WeekResponse.from_summary(summary),
    )
