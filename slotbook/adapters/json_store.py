"""
File-backed booking store for running without a database.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..config import AppConfig, BusinessConfig
from ..domain.exceptions import NotFoundError, StoreError
from ..domain.models import (
    BookingRecord,
    BookingRules,
    BookingStatus,
    Service,
    TimeRange,
    WeeklySchedule,
)

logger = logging.getLogger(__name__)


class JsonBookingStore:
    """
    Booking store that reads businesses from the app config and bookings
    from a JSON file.

    The bookings file holds a list of rows shaped like the relational
    ``booking`` table:

        {"id": "b1", "businessId": "acme", "start": "2024-11-25T10:00:00",
         "end": "2024-11-25T10:30:00", "status": "CONFIRMED", "locationId": null}

    Naive timestamps are interpreted in the owning business's timezone.
    """

    def __init__(self, config: AppConfig, data_file: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            config: Application configuration holding the businesses
            data_file: Path to the bookings JSON file; a missing file means no bookings
        """
        self.config = config
        self.data_file = data_file
        self._rows = self._load_rows()

    def _load_rows(self) -> List[Dict[str, Any]]:
        """Load raw booking rows from the JSON file."""
        if self.data_file is None or not self.data_file.exists():
            return []

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(rows, list):
            raise StoreError(f"{self.data_file} must contain a list of bookings")

        return rows

    def _business(self, business_id: str) -> BusinessConfig:
        business = self.config.find_business(business_id)
        if business is None:
            raise NotFoundError(f"Business not found: {business_id}")
        return business

    def _parse_row(self, row: Dict[str, Any], timezone: str) -> BookingRecord:
        start = pendulum.parse(row["start"], tz=timezone)
        end = pendulum.parse(row["end"], tz=timezone)
        return BookingRecord(
            id=str(row["id"]),
            business_id=row["businessId"],
            time_range=TimeRange(start=start, end=end),
            status=BookingStatus(row.get("status", BookingStatus.PENDING.value)),
            location_id=row.get("locationId"),
        )

    async def get_schedule(self, business_id: str) -> Optional[WeeklySchedule]:
        return self._business(business_id).weekly_schedule()

    async def get_booking_rules(self, business_id: str) -> BookingRules:
        return self._business(business_id).rules.to_domain()

    async def get_service(self, service_id: str) -> Optional[Service]:
        for business in self.config.businesses:
            service = business.find_service(service_id)
            if service is not None:
                return service
        return None

    async def list_bookings(
        self,
        business_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[BookingRecord]:
        """
        Return the business's bookings overlapping ``[start, end)``.

        All statuses are returned; filtering is left to the caller.
        """
        business = self._business(business_id)
        window = TimeRange(start=start, end=end)
        records: List[BookingRecord] = []

        for row in self._rows:
            if not isinstance(row, dict) or row.get("businessId") != business_id:
                continue

            try:
                record = self._parse_row(row, business.timezone)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed booking row %r: %s", row.get("id"), exc)
                continue

            if record.time_range.overlaps(window):
                records.append(record)

        records.sort(key=lambda record: record.time_range.start)
        return records
