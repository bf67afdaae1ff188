"""
Conflict detection for booking requests and ranking of alternative slots.
"""

from typing import Iterable, List, Optional

from .availability import generate_slots
from .models import AlternativeSlot, ConflictResult, DayHours, TimeRange

DEFAULT_MAX_ALTERNATIVES = 5


def intervals_overlap(first: TimeRange, second: TimeRange) -> bool:
    """Strict overlap test; symmetric in its arguments."""
    return first.overlaps(second)


def find_conflicts(
    requested: TimeRange,
    existing_bookings: Iterable[TimeRange],
    buffer_minutes: int = 0,
) -> List[TimeRange]:
    """Return the bookings that the (buffer-padded) request overlaps."""
    padded = requested.padded(buffer_minutes)
    return [booking for booking in existing_bookings if intervals_overlap(padded, booking)]


def _describe_alternative(requested: TimeRange, slot: TimeRange, minutes_diff: float) -> str:
    if minutes_diff < 30:
        direction = "later" if slot.start > requested.start else "earlier"
        return f"Same time slot, just {round(minutes_diff)} minutes {direction}"
    if minutes_diff < 60:
        return f"Close alternative: {slot.start.format('h:mm A')}"
    if minutes_diff < 180:
        return f"Alternative time: {slot.start.format('h:mm A')}"
    return f"Available at {slot.start.format('h:mm A')}"


def _score_alternative(requested: TimeRange, slot: TimeRange, minutes_diff: float) -> float:
    # Lose a tenth of a point per minute away from the requested start
    score = 100 - minutes_diff / 10

    if (requested.start.hour < 12) == (slot.start.hour < 12):
        score += 10

    if requested.start.date() == slot.start.date():
        score += 20

    return max(0.0, score)


def find_alternative_slots(
    requested: TimeRange,
    duration_minutes: int,
    existing_bookings: Iterable[TimeRange],
    day_hours: Optional[DayHours],
    buffer_minutes: int = 0,
    max_alternatives: int = DEFAULT_MAX_ALTERNATIVES,
) -> List[AlternativeSlot]:
    """
    Rank free slots on the requested day by closeness to the request.

    Returns at most ``max_alternatives`` slots, best first. Equal scores
    keep chronological order.
    """
    bookings = list(existing_bookings)
    starts = generate_slots(
        date=requested.start,
        day_hours=day_hours,
        duration_minutes=duration_minutes,
        existing_bookings=bookings,
        buffer_minutes=buffer_minutes,
    )

    alternatives: List[AlternativeSlot] = []

    for start in starts:
        if start == requested.start:
            continue

        slot = TimeRange(start=start, end=start.add(minutes=duration_minutes))
        minutes_diff = abs((slot.start - requested.start).total_seconds()) / 60

        alternatives.append(
            AlternativeSlot(
                time_range=slot,
                reason=_describe_alternative(requested, slot, minutes_diff),
                score=_score_alternative(requested, slot, minutes_diff),
            )
        )

    alternatives.sort(key=lambda alternative: -alternative.score)
    return alternatives[:max_alternatives]


def detect_conflict(
    requested: TimeRange,
    duration_minutes: int,
    existing_bookings: Iterable[TimeRange],
    day_hours: Optional[DayHours],
    buffer_minutes: int = 0,
    max_alternatives: int = DEFAULT_MAX_ALTERNATIVES,
) -> ConflictResult:
    """
    Check a requested booking against a fresh bookings snapshot.

    When the request conflicts, the result lists the overlapping bookings
    and ranked alternatives for the same day.
    """
    bookings = list(existing_bookings)
    conflicting = find_conflicts(requested, bookings, buffer_minutes)

    if not conflicting:
        return ConflictResult(has_conflict=False)

    alternatives = find_alternative_slots(
        requested=requested,
        duration_minutes=duration_minutes,
        existing_bookings=bookings,
        day_hours=day_hours,
        buffer_minutes=buffer_minutes,
        max_alternatives=max_alternatives,
    )

    return ConflictResult(
        has_conflict=True,
        conflicting_bookings=tuple(conflicting),
        alternatives=tuple(alternatives),
    )
