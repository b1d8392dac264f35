"""
Data models for clock events, planned days and remote history.

ClockEvent is the single canonical event shape: a kind plus one wall-clock
time. The vendor's numeric codes only appear at the client boundary.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum


class ClockKind(Enum):
    """The four clock event kinds with their vendor code and display order."""

    ENTRY = ("entry", 0, 1, "Entry")
    PAUSE = ("pause", 2, 2, "Pause")
    RESUME = ("resume", 3, 3, "Resume")
    EXIT = ("exit", 1, 4, "Exit")

    def __init__(self, key: str, code: int, order: int, label: str):
        self.key = key
        self.code = code
        self.order = order
        self.label = label

    @classmethod
    def from_code(cls, code: int) -> "ClockKind":
        """Map an Intratime INOUT_TYPE value to a kind."""
        for kind in cls:
            if kind.code == code:
                return kind
        raise ValueError(f"Unknown clocking type code: {code!r}")

    @classmethod
    def from_key(cls, key: str) -> "ClockKind":
        for kind in cls:
            if kind.key == key:
                return kind
        raise ValueError(f"Unknown clocking kind: {key!r}")


# DaySchedule field holding the time for each kind
SCHEDULE_FIELDS = {
    ClockKind.ENTRY: "entry_time",
    ClockKind.PAUSE: "pause_out_time",
    ClockKind.RESUME: "pause_in_time",
    ClockKind.EXIT: "exit_time",
}


@dataclass(frozen=True)
class ClockEvent:
    """A single fichaje, submitted or historical."""

    date: date
    kind: ClockKind
    time: str  # HH:MM or HH:MM:SS, local wall clock
    source_id: str | None = None


@dataclass
class DaySchedule:
    """A planned (not yet submitted) working day."""

    weekday_label: str
    date: date
    entry_time: str = ""
    pause_out_time: str = ""
    pause_in_time: str = ""
    exit_time: str = ""
    lunch_enabled: bool = True
    computed_hours: float = 0.0
    is_rest_day: bool = False

    def time_for(self, kind: ClockKind) -> str:
        return getattr(self, SCHEDULE_FIELDS[kind]) or ""

    def with_changes(self, **changes) -> "DaySchedule":
        return replace(self, **changes)


@dataclass(frozen=True)
class DayHistory:
    """Authoritative remote record of one calendar day."""

    date: date
    events: tuple[ClockEvent, ...] = field(default_factory=tuple)
    total_hours: float = 0.0

    def has(self, kind: ClockKind) -> bool:
        return any(e.kind == kind for e in self.events)

    @property
    def is_complete(self) -> bool:
        return self.has(ClockKind.EXIT)

    @property
    def is_in_progress(self) -> bool:
        return self.has(ClockKind.ENTRY) and not self.has(ClockKind.EXIT)

    def first_time(self, kind: ClockKind) -> str:
        """Time of the first event of a kind (events are kept in display order)."""
        for event in self.events:
            if event.kind == kind:
                return event.time
        return ""

    def last_time(self, kind: ClockKind) -> str:
        times = [e.time for e in self.events if e.kind == kind]
        return max(times) if times else ""
