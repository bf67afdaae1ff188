"""
Per-request localization settings for rendering dates and times.

Settings are passed explicitly by the caller; after a business updates its
localization, the caller simply builds a new ``LocalizationSettings``.
"""

from dataclasses import dataclass

from pendulum import DateTime

DEFAULT_TIMEZONE = "UTC"
DEFAULT_DATE_FORMAT = "MMM D, YYYY"
DEFAULT_TIME_FORMAT = "h:mm A"


@dataclass(frozen=True)
class LocalizationSettings:
    """Timezone plus pendulum format tokens for dates and times."""
    timezone: str = DEFAULT_TIMEZONE
    date_format: str = DEFAULT_DATE_FORMAT
    time_format: str = DEFAULT_TIME_FORMAT

    def _localize(self, moment: DateTime) -> DateTime:
        return moment.in_timezone(self.timezone)

    def format_date(self, moment: DateTime) -> str:
        return self._localize(moment).format(self.date_format)

    def format_time(self, moment: DateTime) -> str:
        return self._localize(moment).format(self.time_format)

    def format_datetime(self, moment: DateTime) -> str:
        """Format both date and time, separated by a space."""
        return f"{self.format_date(moment)} {self.format_time(moment)}"
