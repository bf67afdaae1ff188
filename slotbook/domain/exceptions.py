"""
Domain-specific exception hierarchy for the slotbook application.
"""


class SlotbookError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeError(SlotbookError, ValueError):
    """Raised when a wall-clock time string is not in HH:mm form."""


class BookingRuleError(SlotbookError):
    """Raised when a booking request violates the business's booking rules."""


class StoreError(SlotbookError):
    """Raised when booking or schedule data cannot be loaded or parsed."""


class NotFoundError(StoreError):
    """Raised when a business or service is unknown to the store."""
