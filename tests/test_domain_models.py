"""
Tests for domain models and time helpers.
"""

from datetime import time

import pendulum
import pytest

from slotbook.domain.exceptions import InvalidTimeError
from slotbook.domain.localization import LocalizationSettings
from slotbook.domain.models import (
    BookingRecord,
    BookingStatus,
    DayHours,
    TimeRange,
    WeeklySchedule,
    weekday_index,
)
from slotbook.domain.time_utils import anchor_time, format_time, parse_time


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_empty_time_range_raises_error(self):
        moment = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError):
            TimeRange(start=moment, end=moment)

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin")
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert tr1.overlaps(tr1)
        assert not tr1.overlaps(tr3)  # touching at 12:00
        assert not tr3.overlaps(tr1)

    def test_padded(self):
        """Padding widens both ends and zero padding is a no-op."""
        tr = TimeRange(
            start=pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 10:30", tz="Europe/Berlin")
        )

        padded = tr.padded(15)

        assert padded.start == pendulum.parse("2024-11-25 09:45", tz="Europe/Berlin")
        assert padded.end == pendulum.parse("2024-11-25 10:45", tz="Europe/Berlin")
        assert tr.padded(0) is tr


class TestDayHours:
    """Tests for building day hours from stored records."""

    def test_open_record(self):
        assert DayHours.from_record({"open": "08:30", "close": "18:00", "isOpen": True}) == \
            DayHours(open="08:30", close="18:00", is_open=True)

    def test_missing_times_use_defaults(self):
        assert DayHours.from_record({"isOpen": True}) == DayHours(open="09:00", close="17:00")

    @pytest.mark.parametrize("record", [None, {}, "09:00-17:00", {"open": "09:00", "close": "17:00"}, {"isOpen": False}])
    def test_absent_records(self, record):
        assert DayHours.from_record(record) is None

    def test_snake_case_flag(self):
        assert DayHours.from_record({"open": "10:00", "close": "12:00", "is_open": True}) is not None


class TestWeeklySchedule:
    """Tests for the indexed weekly schedule."""

    def test_indexed_sunday_first(self):
        schedule = WeeklySchedule.from_mapping({
            "sunday": {"open": "10:00", "close": "14:00", "isOpen": True},
            "monday": {"open": "09:00", "close": "17:00", "isOpen": True},
        })

        assert schedule.for_weekday(0) == DayHours(open="10:00", close="14:00")
        assert schedule.for_weekday(1) == DayHours(open="09:00", close="17:00")
        assert schedule.for_weekday(6) is None

    def test_for_date(self):
        schedule = WeeklySchedule.from_mapping({"saturday": {"isOpen": True}})

        saturday = pendulum.parse("2024-11-23", tz="Europe/Berlin")
        monday = pendulum.parse("2024-11-25", tz="Europe/Berlin")

        assert schedule.for_date(saturday) == DayHours(open="09:00", close="17:00")
        assert schedule.for_date(monday) is None

    def test_requires_seven_days(self):
        with pytest.raises(ValueError, match="7 days"):
            WeeklySchedule(days=(None,) * 6)

    def test_weekday_index(self):
        assert weekday_index(pendulum.parse("2024-11-24", tz="Europe/Berlin")) == 0  # Sunday
        assert weekday_index(pendulum.parse("2024-11-25", tz="Europe/Berlin")) == 1  # Monday
        assert weekday_index(pendulum.parse("2024-11-30", tz="Europe/Berlin")) == 6  # Saturday


class TestBookingRecord:
    """Tests for persisted booking rows."""

    def test_cancelled_is_inactive(self):
        tr = TimeRange(
            start=pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 10:30", tz="Europe/Berlin")
        )

        assert BookingRecord(id="1", business_id="b", time_range=tr).is_active
        assert not BookingRecord(id="2", business_id="b", time_range=tr, status=BookingStatus.CANCELLED).is_active


class TestTimeHelpers:
    """Tests for HH:mm parsing and formatting."""

    @pytest.mark.parametrize("value, expected", [
        ("09:00", time(9, 0)),
        ("9:05", time(9, 5)),
        ("23:59", time(23, 59)),
        ("00:00", time(0, 0)),
    ])
    def test_parse_time(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["", "9", "24:00", "12:60", "ab:cd", "09:00:00", "9am"])
    def test_parse_time_rejects_malformed(self, value):
        with pytest.raises(InvalidTimeError):
            parse_time(value)

    def test_invalid_time_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_time("noon")

    def test_anchor_time_uses_target_day(self):
        date = pendulum.parse("2024-11-25 15:42", tz="Europe/Berlin")

        anchored = anchor_time(date, "09:30")

        assert anchored == pendulum.parse("2024-11-25 09:30", tz="Europe/Berlin")
        assert anchored.timezone_name == "Europe/Berlin"

    def test_format_time(self):
        assert format_time(pendulum.parse("2024-11-25 07:05", tz="Europe/Berlin")) == "07:05"


class TestLocalizationSettings:
    """Tests for explicit per-request localization."""

    def test_defaults(self):
        settings = LocalizationSettings()
        moment = pendulum.parse("2024-11-25 14:30", tz="UTC")

        assert settings.format_date(moment) == "Nov 25, 2024"
        assert settings.format_time(moment) == "2:30 PM"
        assert settings.format_datetime(moment) == "Nov 25, 2024 2:30 PM"

    def test_converts_to_settings_timezone(self):
        settings = LocalizationSettings(timezone="Europe/Berlin", date_format="DD.MM.YYYY", time_format="HH:mm")
        moment = pendulum.parse("2024-11-25 23:30", tz="UTC")

        assert settings.format_datetime(moment) == "26.11.2024 00:30"
