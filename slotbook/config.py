"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .domain.localization import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_TIME_FORMAT,
    DEFAULT_TIMEZONE,
    LocalizationSettings,
)
from .domain.models import (
    DEFAULT_CLOSE,
    DEFAULT_OPEN,
    WEEKDAY_NAMES,
    BookingRules,
    Service,
    WeeklySchedule,
)
from .domain.time_utils import parse_time


class DayHoursConfig(BaseModel):
    """Opening hours for a single weekday."""
    model_config = ConfigDict(populate_by_name=True)

    open: str = DEFAULT_OPEN
    close: str = DEFAULT_CLOSE
    is_open: bool = Field(default=False, alias="isOpen")

    @field_validator("open", "close", mode="before")
    @classmethod
    def coerce_sexagesimal(cls, value: object) -> object:
        # PyYAML reads unquoted 10:30 as the base-60 integer 630
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value // 60:02d}:{value % 60:02d}"
        return value

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Ensure times are HH:mm wall-clock values."""
        parse_time(value)
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DayHoursConfig":
        """Ensure an open day opens before it closes."""
        if self.is_open and parse_time(self.open) >= parse_time(self.close):
            raise ValueError(f"open ({self.open}) must be earlier than close ({self.close})")
        return self

    def to_record(self) -> Dict[str, object]:
        return {"open": self.open, "close": self.close, "isOpen": self.is_open}


class BookingRulesConfig(BaseModel):
    """Booking policy for a business."""
    buffer_minutes: int = 0
    minimum_advance_booking_hours: int = 0
    default_duration_minutes: int = 30

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes must not be negative")
        return value

    @field_validator("minimum_advance_booking_hours")
    @classmethod
    def validate_advance_hours(cls, value: int) -> int:
        """Validate advance window is between 0 hours and 7 days."""
        if not 0 <= value <= 168:
            raise ValueError(f"minimum_advance_booking_hours must be between 0 and 168, got {value}")
        return value

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value

    def to_domain(self) -> BookingRules:
        return BookingRules(
            buffer_minutes=self.buffer_minutes,
            minimum_advance_booking_hours=self.minimum_advance_booking_hours,
            default_duration_minutes=self.default_duration_minutes,
        )


class LocalizationConfig(BaseModel):
    """Display settings for dates and times; timezone defaults to the business's."""
    timezone: Optional[str] = None
    date_format: str = DEFAULT_DATE_FORMAT
    time_format: str = DEFAULT_TIME_FORMAT

    def to_domain(self, default_timezone: str = DEFAULT_TIMEZONE) -> LocalizationSettings:
        return LocalizationSettings(
            timezone=self.timezone or default_timezone,
            date_format=self.date_format,
            time_format=self.time_format,
        )


class ServiceConfig(BaseModel):
    """A bookable service offered by a business."""
    id: str
    name: str
    duration_minutes: int = 30
    location_id: Optional[str] = None

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value


class BusinessConfig(BaseModel):
    """A tenant: weekly availability, booking rules and services."""
    id: str
    name: str = ""
    timezone: str = DEFAULT_TIMEZONE
    availability: Optional[Dict[str, Optional[DayHoursConfig]]] = None
    rules: BookingRulesConfig = Field(default_factory=BookingRulesConfig)
    localization: LocalizationConfig = Field(default_factory=LocalizationConfig)
    services: List[ServiceConfig] = Field(default_factory=list)

    @field_validator("availability")
    @classmethod
    def validate_weekdays(
        cls, value: Optional[Dict[str, Optional[DayHoursConfig]]]
    ) -> Optional[Dict[str, Optional[DayHoursConfig]]]:
        """Ensure availability is keyed by lowercase weekday names."""
        if value is None:
            return value
        normalized = {day.lower(): hours for day, hours in value.items()}
        unknown = sorted(day for day in normalized if day not in WEEKDAY_NAMES)
        if unknown:
            raise ValueError(f"Unknown weekday(s) in availability: {', '.join(unknown)}")
        return normalized

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: List[ServiceConfig]) -> List[ServiceConfig]:
        """Ensure service ids are unique within the business."""
        seen: set[str] = set()
        for service in value:
            if service.id in seen:
                raise ValueError(f"Duplicate service id detected: {service.id}")
            seen.add(service.id)
        return value

    def display_name(self) -> str:
        return self.name or self.id

    def localization_settings(self) -> LocalizationSettings:
        return self.localization.to_domain(default_timezone=self.timezone)

    def weekly_schedule(self) -> Optional[WeeklySchedule]:
        """Return the weekly schedule, or None if availability was never set."""
        if self.availability is None:
            return None
        return WeeklySchedule.from_mapping(
            {day: hours.to_record() for day, hours in self.availability.items() if hours is not None}
        )

    def find_service(self, service_id: str) -> Optional[Service]:
        for service in self.services:
            if service.id == service_id:
                return Service(
                    id=service.id,
                    business_id=self.id,
                    name=service.name,
                    duration_minutes=service.duration_minutes,
                    location_id=service.location_id,
                )
        return None


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: str = "bookings.json"
    default_business: Optional[str] = None
    businesses: List[BusinessConfig] = Field(default_factory=list)

    @field_validator("businesses")
    @classmethod
    def validate_businesses(cls, value: List[BusinessConfig]) -> List[BusinessConfig]:
        """Ensure business ids are unique."""
        seen: set[str] = set()
        for business in value:
            if business.id in seen:
                raise ValueError(f"Duplicate business id detected: {business.id}")
            seen.add(business.id)
        return value

    @model_validator(mode="after")
    def validate_default_business(self) -> "AppConfig":
        if self.default_business and self.find_business(self.default_business) is None:
            raise ValueError(f"default_business '{self.default_business}' is not configured")
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_business(self, business_id: str) -> Optional[BusinessConfig]:
        for business in self.businesses:
            if business.id == business_id:
                return business
        return None

    def resolve_business_id(self, business_id: Optional[str] = None) -> str:
        """
        Pick the business to operate on.

        An explicit id wins, then ``default_business``, then the only
        configured business.

        Raises:
            ValueError: If no business can be determined
        """
        if business_id:
            return business_id
        if self.default_business:
            return self.default_business
        if len(self.businesses) == 1:
            return self.businesses[0].id
        raise ValueError(
            "No business selected. Pass --business or set default_business in the config."
        )

    def resolve_data_path(self, config_path: Path) -> Path:
        """Resolve ``data_file`` relative to the config file's directory."""
        data_path = Path(self.data_file)
        if data_path.is_absolute():
            return data_path
        return config_path.parent / data_path


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
