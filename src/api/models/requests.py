"""Pydantic request models for API endpoints."""

from datetime import date

from pydantic import BaseModel, Field

# HH:MM or HH:MM:SS; an empty string clears the field
TIME_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?)?$"


class DayEdit(BaseModel):
    """User edits for one weekday. Omitted fields keep their defaults."""

    date: date
    entry_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    pause_out_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    pause_in_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    exit_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    lunch_enabled: bool | None = None
    is_rest_day: bool | None = None

    def changes(self) -> dict:
        changes = self.model_dump(exclude={"date"}, exclude_unset=True)
        # A null time clears the field; a null flag keeps the default
        for flag in ("lunch_enabled", "is_rest_day"):
            if changes.get(flag, False) is None:
                del changes[flag]
        return changes


class WeekRequest(BaseModel):
    """A week identified by any of its dates, plus per-day edits."""

    date: date
    days: list[DayEdit] = []

    def edits(self) -> dict[date, dict]:
        return {d.date: d.changes() for d in self.days}


class QuotaRequest(BaseModel):
    weekly_quota: float = Field(gt=0, le=168)
