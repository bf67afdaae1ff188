"""
Application services for presenting and validating bookable slots.

The service coordinates reading schedules, rules and bookings via a booking
store adapter and delegates the slot computation to the domain-level
resolver. The store is described by a protocol so the relational store,
the JSON store or a test stub can be plugged in.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.availability import generate_slots, resolve_day_hours
from ..domain.conflicts import detect_conflict
from ..domain.exceptions import BookingRuleError, NotFoundError
from ..domain.models import (
    BookingRecord,
    BookingRules,
    ConflictResult,
    Service,
    TimeRange,
    WeeklySchedule,
)
from ..domain.time_utils import anchor_time

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    async def get_schedule(self, business_id: str) -> Optional[WeeklySchedule]:
        """Return the weekly schedule, or None if none was ever stored."""

    async def get_booking_rules(self, business_id: str) -> BookingRules:
        """Return booking rules; raise NotFoundError for unknown businesses."""

    async def get_service(self, service_id: str) -> Optional[Service]:
        """Return the service, or None if unknown."""

    async def list_bookings(
        self,
        business_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[BookingRecord]:
        """Return bookings of any status overlapping ``[start, end)``."""


def filter_active_bookings(
    records: Iterable[BookingRecord],
    location_id: Optional[str] = None,
) -> List[TimeRange]:
    """
    Keep the bookings that block slots for a location.

    Cancelled bookings never block. A booking for a specific location is
    blocked by bookings at that location and by all-locations bookings; an
    all-locations request is only blocked by other all-locations bookings.
    """
    blocking: List[TimeRange] = []

    for record in records:
        if not record.is_active:
            continue
        if location_id is None:
            if record.location_id is not None:
                continue
        elif record.location_id not in (location_id, None):
            continue
        blocking.append(record.time_range)

    return blocking


def filter_minimum_advance(
    slots: Sequence[DateTime],
    now: DateTime,
    minimum_advance_hours: int,
) -> List[DateTime]:
    """Drop slots starting before ``now`` plus the advance-booking window."""
    earliest = now.add(hours=minimum_advance_hours)
    return [slot for slot in slots if slot >= earliest]


def _day_window(date: DateTime) -> TimeRange:
    day_start = date.start_of("day")
    return TimeRange(start=day_start, end=day_start.add(days=1))


class AvailabilityService:
    """
    Orchestrates store access and slot computation for one request.

    Every call reads a fresh bookings snapshot. Slots returned here are
    only candidates: the caller must call ``validate_booking_request``
    inside the transaction that inserts the booking.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        clock: Optional[Callable[[], DateTime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or pendulum.now

    async def _business_service(self, business_id: str, service_id: str) -> Optional[Service]:
        """Look up a service, treating another business's service as unknown."""
        service = await self._store.get_service(service_id)
        if service is None or service.business_id != business_id:
            return None
        return service

    async def _resolve_service(self, business_id: str, service_id: Optional[str]) -> Optional[Service]:
        if not service_id:
            return None
        service = await self._business_service(business_id, service_id)
        if service is None:
            logger.warning("Unknown service %s, falling back to the default duration", service_id)
        return service

    async def fetch_blocking_bookings(
        self,
        *,
        business_id: str,
        start: DateTime,
        end: DateTime,
        location_id: Optional[str],
    ) -> List[TimeRange]:
        """Fetch bookings in the window and keep only those that block slots."""
        records = await self._store.list_bookings(business_id, start, end)
        blocking = filter_active_bookings(records, location_id)
        logger.debug(
            "%d of %d bookings block %s between %s and %s",
            len(blocking),
            len(records),
            location_id or "all locations",
            start,
            end,
        )
        return blocking

    async def slots_for_date(
        self,
        *,
        business_id: str,
        date: DateTime,
        service_id: Optional[str] = None,
        location_id: Optional[str] = None,
    ) -> List[DateTime]:
        """
        Compute the bookable start times for one day.

        The service's own location applies when no location is given.
        Slots inside the minimum advance window are removed.
        """
        rules = await self._store.get_booking_rules(business_id)
        schedule = await self._store.get_schedule(business_id)
        if schedule is None:
            return []

        service = await self._resolve_service(business_id, service_id)
        duration = service.duration_minutes if service else rules.default_duration_minutes
        if location_id is None and service is not None:
            location_id = service.location_id

        window = _day_window(date)
        bookings = await self.fetch_blocking_bookings(
            business_id=business_id,
            start=window.start,
            end=window.end,
            location_id=location_id,
        )

        slots = generate_slots(
            date=window.start,
            day_hours=resolve_day_hours(schedule, window.start),
            duration_minutes=duration,
            existing_bookings=bookings,
            buffer_minutes=rules.buffer_minutes,
        )

        return filter_minimum_advance(slots, self._clock(), rules.minimum_advance_booking_hours)

    async def dates_with_slots(
        self,
        *,
        business_id: str,
        service_id: str,
        start_date: DateTime,
        end_date: DateTime,
        location_id: Optional[str] = None,
    ) -> List[str]:
        """
        Return the ``YYYY-MM-DD`` dates in the inclusive range with at least one slot.

        Bookings for the whole range are fetched once.

        Raises:
            ValueError: If the range starts after it ends
        """
        first_day = start_date.start_of("day")
        last_day = end_date.start_of("day")
        if first_day > last_day:
            raise ValueError("start_date must be before or equal to end_date")

        rules = await self._store.get_booking_rules(business_id)
        schedule = await self._store.get_schedule(business_id)
        if schedule is None:
            return []

        service = await self._resolve_service(business_id, service_id)
        duration = service.duration_minutes if service else rules.default_duration_minutes
        if location_id is None and service is not None:
            location_id = service.location_id

        bookings = await self.fetch_blocking_bookings(
            business_id=business_id,
            start=first_day,
            end=last_day.add(days=1),
            location_id=location_id,
        )

        now = self._clock()
        dates: List[str] = []
        current = first_day

        while current <= last_day:
            window = _day_window(current)
            day_bookings = [booking for booking in bookings if booking.overlaps(window)]

            slots = generate_slots(
                date=current,
                day_hours=resolve_day_hours(schedule, current),
                duration_minutes=duration,
                existing_bookings=day_bookings,
                buffer_minutes=rules.buffer_minutes,
            )
            slots = filter_minimum_advance(slots, now, rules.minimum_advance_booking_hours)

            if slots:
                dates.append(current.to_date_string())

            current = current.add(days=1)

        return dates

    async def validate_booking_request(
        self,
        *,
        business_id: str,
        start: DateTime,
        service_id: str,
        location_id: Optional[str] = None,
    ) -> ConflictResult:
        """
        Re-check a booking request against the rules and a fresh snapshot.

        Returns:
            ConflictResult; when it conflicts, alternatives for the same day are ranked

        Raises:
            NotFoundError: If the service is unknown to the business
            BookingRuleError: If the request is in the past, inside the
                minimum advance window, on a closed day or outside
                business hours
        """
        service = await self._business_service(business_id, service_id)
        if service is None:
            raise NotFoundError(f"Service not found: {service_id}")

        rules = await self._store.get_booking_rules(business_id)
        if location_id is None:
            location_id = service.location_id

        now = self._clock()
        if start < now:
            raise BookingRuleError("Cannot book in the past")

        hours = rules.minimum_advance_booking_hours
        if start < now.add(hours=hours):
            raise BookingRuleError(
                f"Bookings must be made at least {hours} hour{'' if hours == 1 else 's'} in advance"
            )

        schedule = await self._store.get_schedule(business_id)
        if schedule is None:
            raise BookingRuleError("Business has no availability set")

        day_hours = resolve_day_hours(schedule, start)
        if day_hours is None:
            raise BookingRuleError("Business is closed on this day")

        requested = TimeRange(start=start, end=start.add(minutes=service.duration_minutes))
        if requested.start < anchor_time(start, day_hours.open) or requested.end > anchor_time(start, day_hours.close):
            raise BookingRuleError(f"Outside business hours ({day_hours.open} - {day_hours.close})")

        window = _day_window(start)
        bookings = await self.fetch_blocking_bookings(
            business_id=business_id,
            start=window.start,
            end=window.end,
            location_id=location_id,
        )

        result = detect_conflict(
            requested=requested,
            duration_minutes=service.duration_minutes,
            existing_bookings=bookings,
            day_hours=day_hours,
            buffer_minutes=rules.buffer_minutes,
        )

        if result.has_conflict:
            logger.info(
                "Booking request %s for %s conflicts with %d booking(s)",
                requested,
                business_id,
                len(result.conflicting_bookings),
            )

        return result
