"""Pydantic response models for API endpoints."""

from datetime import date

from pydantic import BaseModel

from core.session import Session
from core.validation import ScheduleValidation
from models.clocking import ClockEvent, DayHistory
from services.calendar import CalendarDay, MonthCalendar
from services.hours import format_hours
from services.week import DayStatus, WeekSummary


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    holidays_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NO_SESSION = "NO_SESSION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SUBMISSION_ABORTED = "SUBMISSION_ABORTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class UserResponse(BaseModel):
    user_id: str
    username: str
    full_name: str
    email: str
    weekly_quota: float

    @classmethod
    def from_session(cls, session: Session) -> "UserResponse":
        return cls(
            user_id=session.user_id,
            username=session.username,
            full_name=session.full_name,
            email=session.email,
            weekly_quota=session.weekly_quota,
        )


class LoginResponse(BaseModel):
    token: str
    user_id: str
    user: UserResponse


class ClockEventResponse(BaseModel):
    date: date
    kind: str
    label: str
    time: str
    source_id: str | None = None

    @classmethod
    def from_event(cls, event: ClockEvent) -> "ClockEventResponse":
        return cls(
            date=event.date,
            kind=event.kind.key,
            label=event.kind.label,
            time=event.time,
            source_id=event.source_id,
        )


class DayHistoryResponse(BaseModel):
    date: date
    events: list[ClockEventResponse]
    total_hours: float
    complete: bool

    @classmethod
    def from_history(cls, history: DayHistory) -> "DayHistoryResponse":
        return cls(
            date=history.date,
            events=[ClockEventResponse.from_event(e) for e in history.events],
            total_hours=history.total_hours,
            complete=history.is_complete,
        )


class DayStatusResponse(BaseModel):
    weekday_label: str
    date: date
    entry_time: str
    pause_out_time: str
    pause_in_time: str
    exit_time: str
    lunch_enabled: bool
    is_rest_day: bool
    computed_hours: float
    hours: float
    hours_display: str
    state: str
    holiday_name: str | None = None
    history: DayHistoryResponse | None = None
    error_fields: list[str] = []

    @classmethod
    def from_status(cls, status: DayStatus, error_fields: set[str]) -> "DayStatusResponse":
        day = status.schedule
        return cls(
            weekday_label=day.weekday_label,
            date=day.date,
            entry_time=day.entry_time,
            pause_out_time=day.pause_out_time,
            pause_in_time=day.pause_in_time,
            exit_time=day.exit_time,
            lunch_enabled=day.lunch_enabled,
            is_rest_day=day.is_rest_day,
            computed_hours=day.computed_hours,
            hours=status.hours,
            hours_display=format_hours(status.hours),
            state=status.state,
            holiday_name=status.holiday_name,
            history=DayHistoryResponse.from_history(status.history) if status.history else None,
            error_fields=sorted(error_fields),
        )


class WeekResponse(BaseModel):
    start: date
    days: list[DayStatusResponse]
    total_hours: float
    total_display: str
    quota: float
    difference: float
    completed: bool
    errors: list[str]
    can_submit: bool

    @classmethod
    def from_summary(cls, summary: WeekSummary) -> "WeekResponse":
        fields = summary.validation.fields
        return cls(
            start=summary.start,
            days=[
                DayStatusResponse.from_status(s, fields.get(s.schedule.date, set()))
                for s in summary.days
            ],
            total_hours=round(summary.total_hours, 2),
            total_display=format_hours(summary.total_hours),
            quota=summary.quota,
            difference=round(summary.difference, 2),
            completed=summary.completed,
            errors=summary.validation.messages,
            can_submit=summary.validation.ok,
        )


class ValidationResponse(BaseModel):
    ok: bool
    messages: list[str]
    fields: dict[date, list[str]]

    @classmethod
    def from_validation(cls, validation: ScheduleValidation) -> "ValidationResponse":
        return cls(
            ok=validation.ok,
            messages=validation.messages,
            fields={d: sorted(names) for d, names in validation.fields.items()},
        )


class SubmittedEventResponse(BaseModel):
    date: date
    kind: str
    planned_time: str
    timestamp: str


class SubmitResponse(BaseModel):
    submitted: list[SubmittedEventResponse]
    week: WeekResponse


class CalendarDayResponse(BaseModel):
    date: date
    hours: float
    hours_display: str
    in_progress: bool
    is_weekend: bool
    is_today: bool
    holiday_name: str | None = None
    history: DayHistoryResponse | None = None

    @classmethod
    def from_day(cls, day: CalendarDay) -> "CalendarDayResponse":
        return cls(
            date=day.date,
            hours=day.hours,
            hours_display=format_hours(day.hours),
            in_progress=day.in_progress,
            is_weekend=day.is_weekend,
            is_today=day.is_today,
            holiday_name=day.holiday_name,
            history=DayHistoryResponse.from_history(day.history) if day.history else None,
        )


class CalendarWeekResponse(BaseModel):
    days: list[CalendarDayResponse | None]
    total_hours: float
    total_display: str


class MonthHistoryResponse(BaseModel):
    year: int
    month: int
    weeks: list[CalendarWeekResponse]
    total_hours: float
    total_display: str

    @classmethod
    def from_calendar(cls, month: MonthCalendar) -> "MonthHistoryResponse":
        return cls(
            year=month.year,
            month=month.month,
            weeks=[
                CalendarWeekResponse(
                    days=[CalendarDayResponse.from_day(d) if d else None for d in week.days],
                    total_hours=round(week.total_hours, 2),
                    total_display=format_hours(week.total_hours),
                )
                for week in month.weeks
            ],
            total_hours=round(month.total_hours, 2),
            total_display=format_hours(month.total_hours),
        )


class HolidayResponse(BaseModel):
    date: date
    name: str
