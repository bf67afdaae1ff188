"""
Core business logic for computing bookable start times.

This is the heart of the application - pure domain logic without any
external dependencies (no database, no HTTP, no I/O).
"""

import logging
from typing import Iterable, List, Optional

from pendulum import DateTime

from .models import DayHours, TimeRange, WeeklySchedule
from .time_utils import anchor_time

logger = logging.getLogger(__name__)

# Candidate start times are offered on a fixed grid, independent of service duration
SLOT_INTERVAL_MINUTES = 30


def resolve_day_hours(schedule: WeeklySchedule, date: DateTime) -> Optional[DayHours]:
    """
    Select the opening hours that apply to ``date``.

    Returns None when the business has no hours for that weekday or is
    closed. A closed day is an expected state, not an error.
    """
    day_hours = schedule.for_date(date)
    if day_hours is None or not day_hours.is_open:
        return None
    return day_hours


def generate_slots(
    date: DateTime,
    day_hours: Optional[DayHours],
    duration_minutes: int,
    existing_bookings: Iterable[TimeRange] = (),
    buffer_minutes: int = 0,
) -> List[DateTime]:
    """
    Compute every valid start time for a service on ``date``.

    Algorithm:
    1. Anchor opening and closing times on the target day
    2. Walk a 30-minute grid from opening while the service still ends
       at or before closing
    3. Pad each candidate by the buffer on both ends
    4. Reject candidates whose padded range overlaps an existing booking
       (bookings themselves are never padded)

    Args:
        date: Any instant on the target calendar day
        day_hours: Opening hours for that day, or None when closed
        duration_minutes: Length of the service
        existing_bookings: Committed bookings for the day (cancelled ones already removed)
        buffer_minutes: Margin required around every existing booking

    Returns:
        Start instants in ascending order
    """
    if day_hours is None or not day_hours.is_open:
        return []

    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be greater than zero, got {duration_minutes}")
    if buffer_minutes < 0:
        raise ValueError(f"buffer_minutes must not be negative, got {buffer_minutes}")

    opening = anchor_time(date, day_hours.open)
    closing = anchor_time(date, day_hours.close)
    bookings = list(existing_bookings)

    slots: List[DateTime] = []
    current = opening

    while current.add(minutes=duration_minutes) <= closing:
        candidate = TimeRange(start=current, end=current.add(minutes=duration_minutes))
        padded = candidate.padded(buffer_minutes)

        if not any(padded.overlaps(booking) for booking in bookings):
            slots.append(current)

        current = current.add(minutes=SLOT_INTERVAL_MINUTES)

    logger.debug(
        "Generated %d slots for %s (%s-%s, %d min, buffer %d, %d bookings)",
        len(slots),
        date.to_date_string(),
        day_hours.open,
        day_hours.close,
        duration_minutes,
        buffer_minutes,
        len(bookings),
    )

    return slots


class AvailabilityResolver:
    """
    Binds a weekly schedule and buffer policy for repeated slot lookups.
    """

    def __init__(self, schedule: WeeklySchedule, buffer_minutes: int = 0):
        self.schedule = schedule
        self.buffer_minutes = buffer_minutes

    def day_hours_for(self, date: DateTime) -> Optional[DayHours]:
        return resolve_day_hours(self.schedule, date)

    def slots_for_date(
        self,
        date: DateTime,
        duration_minutes: int,
        existing_bookings: Iterable[TimeRange] = (),
    ) -> List[DateTime]:
        """Generate slots for ``date`` using the bound schedule and buffer."""
        return generate_slots(
            date=date,
            day_hours=self.day_hours_for(date),
            duration_minutes=duration_minutes,
            existing_bookings=existing_bookings,
            buffer_minutes=self.buffer_minutes,
        )
