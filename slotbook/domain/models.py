"""
Domain models for schedules, booking intervals and booking rules.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from pendulum import DateTime

# Index order matches the calendar convention used for lookups: Sunday=0 .. Saturday=6
WEEKDAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

DEFAULT_OPEN = "09:00"
DEFAULT_CLOSE = "17:00"


def weekday_index(date: DateTime) -> int:
    """Return the weekday of ``date`` with Sunday as 0 and Saturday as 6."""
    return date.isoweekday() % 7


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps with another.

        Touching endpoints do not count as overlap; identical ranges and
        ranges containing one another do.
        """
        return self.start < other.end and self.end > other.start

    def padded(self, minutes: int) -> "TimeRange":
        """Expand the range symmetrically by ``minutes`` on both ends."""
        if minutes == 0:
            return self
        return TimeRange(
            start=self.start.subtract(minutes=minutes),
            end=self.end.add(minutes=minutes),
        )

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DayHours:
    """Opening hours for one weekday, as ``HH:mm`` wall-clock strings."""
    open: str
    close: str
    is_open: bool = True

    @classmethod
    def from_record(cls, record: Any) -> Optional["DayHours"]:
        """
        Build day hours from a stored ``{open, close, isOpen}`` record.

        Returns None for missing or malformed records and for closed days.
        Missing open/close values fall back to the standard business day.
        """
        if not record or not isinstance(record, Mapping):
            return None

        is_open = record.get("isOpen", record.get("is_open", False))
        if not is_open:
            return None

        return cls(
            open=record.get("open") or DEFAULT_OPEN,
            close=record.get("close") or DEFAULT_CLOSE,
            is_open=True,
        )


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Recurring weekly opening hours.

    ``days`` always holds seven entries indexed Sunday=0 .. Saturday=6;
    ``None`` means no hours are configured for that weekday.
    """
    days: Tuple[Optional[DayHours], ...] = (None,) * 7

    def __post_init__(self):
        if len(self.days) != 7:
            raise ValueError(f"A weekly schedule needs 7 days, got {len(self.days)}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WeeklySchedule":
        """Build a schedule from records keyed by lowercase weekday name."""
        return cls(days=tuple(DayHours.from_record(data.get(name)) for name in WEEKDAY_NAMES))

    def for_weekday(self, index: int) -> Optional[DayHours]:
        return self.days[index]

    def for_date(self, date: DateTime) -> Optional[DayHours]:
        return self.days[weekday_index(date)]


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


@dataclass(frozen=True)
class BookingRecord:
    """A persisted booking row as returned by a booking store."""
    id: str
    business_id: str
    time_range: TimeRange
    status: BookingStatus = BookingStatus.PENDING
    location_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status is not BookingStatus.CANCELLED


@dataclass(frozen=True)
class BookingRules:
    """Business-level booking policy."""
    buffer_minutes: int = 0
    minimum_advance_booking_hours: int = 0
    default_duration_minutes: int = 30


@dataclass(frozen=True)
class AlternativeSlot:
    """A bookable slot offered instead of a conflicting request."""
    time_range: TimeRange
    reason: str
    score: float


@dataclass(frozen=True)
class ConflictResult:
    has_conflict: bool
    conflicting_bookings: Tuple[TimeRange, ...] = field(default_factory=tuple)
    alternatives: Tuple[AlternativeSlot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Service:
    """A bookable service; ``location_id`` None means every location."""
    id: str
    business_id: str
    name: str
    duration_minutes: int
    location_id: Optional[str] = None
