"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityResolver, generate_slots, resolve_day_hours
from .conflicts import detect_conflict, find_alternative_slots, find_conflicts, intervals_overlap
from .localization import LocalizationSettings
from .models import (
    AlternativeSlot,
    BookingRecord,
    BookingRules,
    BookingStatus,
    ConflictResult,
    DayHours,
    Service,
    TimeRange,
    WeeklySchedule,
)
from .time_utils import anchor_time, format_time, parse_time

__all__ = [
    "AlternativeSlot",
    "AvailabilityResolver",
    "BookingRecord",
    "BookingRules",
    "BookingStatus",
    "ConflictResult",
    "DayHours",
    "LocalizationSettings",
    "Service",
    "TimeRange",
    "WeeklySchedule",
    "anchor_time",
    "detect_conflict",
    "find_alternative_slots",
    "find_conflicts",
    "format_time",
    "generate_slots",
    "intervals_overlap",
    "parse_time",
    "resolve_day_hours",
]
