"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityService,
    BookingStoreProtocol,
    filter_active_bookings,
    filter_minimum_advance,
)

__all__ = [
    "AvailabilityService",
    "BookingStoreProtocol",
    "filter_active_bookings",
    "filter_minimum_advance",
]
