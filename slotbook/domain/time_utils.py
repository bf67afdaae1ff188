"""
Helpers converting between ``HH:mm`` strings and real instants.
"""

import re
from datetime import time

from pendulum import DateTime

from .exceptions import InvalidTimeError

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: str) -> time:
    """
    Parse a wall-clock ``HH:mm`` string.

    Raises:
        InvalidTimeError: If the string is not a valid 24-hour time
    """
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidTimeError(f"Invalid time '{value}', expected HH:mm")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeError(f"Invalid time '{value}', expected HH:mm")

    return time(hour=hour, minute=minute)


def anchor_time(date: DateTime, value: str) -> DateTime:
    """Place an ``HH:mm`` wall-clock time on the calendar day of ``date``."""
    wall_clock = parse_time(value)
    return date.start_of("day").set(hour=wall_clock.hour, minute=wall_clock.minute)


def format_time(moment: DateTime) -> str:
    return moment.format("HH:mm")
