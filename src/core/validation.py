"""
Schedule validation: chronology and lunch-pair completeness.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from core.errors import ScheduleValidationError
from models.clocking import DaySchedule
from services.hours import parse_wall_clock

# Natural order of the four instants within a day
TIME_FIELDS = ["entry_time", "pause_out_time", "pause_in_time", "exit_time"]

FIELD_NAMES = {
    "entry_time": "entry",
    "pause_out_time": "lunch pause",
    "pause_in_time": "lunch return",
    "exit_time": "exit",
}


@dataclass
class ScheduleValidation:
    """Validation outcome: display messages plus offending fields per day."""

    messages: list[str] = field(default_factory=list)
    fields: dict[date, set[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.messages

    def raise_for_errors(self) -> None:
        if self.messages:
            raise ScheduleValidationError(self.messages, self.fields)


def validate_schedule(days: list[DaySchedule]) -> ScheduleValidation:
    """
    Validate configured days and collect field-level errors.

    Checks (rest days are skipped):
    0. Every non-empty time parses as HH:MM or HH:MM:SS.
    1. Every present instant is strictly earlier than every later present one
       (entry < pause < return < exit). The earlier field is marked.
    2. Lunch pause and return are both set or both empty.
    """
    messages: list[str] = []
    fields: dict[date, set[str]] = defaultdict(set)

    for day in days:
        if day.is_rest_day:
            continue

        values = {name: getattr(day, name) or "" for name in TIME_FIELDS}
        minutes = {name: parse_wall_clock(value) for name, value in values.items()}

        # Check 0: every non-empty value is a real wall-clock time
        for name in TIME_FIELDS:
            if values[name] and minutes[name] is None:
                messages.append(
                    f"{day.weekday_label}: invalid {FIELD_NAMES[name]} time ({values[name]})"
                )
                fields[day.date].add(name)

        # Check 1: ordering between every pair of present instants
        for i, earlier in enumerate(TIME_FIELDS):
            for later in TIME_FIELDS[i + 1:]:
                if minutes[earlier] is None or minutes[later] is None:
                    continue
                if minutes[earlier] >= minutes[later]:
                    messages.append(
                        f"{day.weekday_label}: {FIELD_NAMES[earlier]} ({values[earlier]}) "
                        f"must be before {FIELD_NAMES[later]} ({values[later]})"
                    )
                    fields[day.date].add(earlier)

        # Check 2: lunch pause and return come as a pair
        has_pause = bool(values["pause_out_time"])
        has_return = bool(values["pause_in_time"])
        if has_pause and not has_return:
            messages.append(f"{day.weekday_label}: missing lunch return time")
            fields[day.date].add("pause_in_time")
        if has_return and not has_pause:
            messages.append(f"{day.weekday_label}: missing lunch pause time")
            fields[day.date].add("pause_out_time")

    return ScheduleValidation(messages=messages, fields=dict(fields))
