"""Tenant-local wall-clock handling.

Appointment times live as tenant-local wall-clock values tagged with the
tenant's fixed UTC offset. The conversion to an absolute instant happens in
exactly one place (``TenantClock.to_utc``, called when an appointment is
written) and never consults the process timezone.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

MIN_OFFSET_MINUTES = -12 * 60
MAX_OFFSET_MINUTES = 14 * 60


def validate_offset(offset_minutes: int) -> int:
    if not MIN_OFFSET_MINUTES <= offset_minutes <= MAX_OFFSET_MINUTES or offset_minutes % 15:
        raise ValueError(
            f"UTC offset must be a multiple of 15 minutes in "
            f"[{MIN_OFFSET_MINUTES}, {MAX_OFFSET_MINUTES}], got {offset_minutes}"
        )
    return offset_minutes


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hhmm_to_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight. Raises ValueError."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(len(p) == 2 and p.isdigit() for p in parts):
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


@dataclass(frozen=True)
class TenantClock:
    """Conversions between a tenant's wall clock and absolute instants."""

    offset_minutes: int

    def __post_init__(self):
        validate_offset(self.offset_minutes)

    @property
    def tzinfo(self) -> timezone:
        return timezone(timedelta(minutes=self.offset_minutes))

    def now(self, utc_now: Optional[datetime] = None) -> datetime:
        """Naive local wall-clock "now" for this tenant."""
        instant = utc_now or datetime.now(timezone.utc)
        return self.to_local(instant)

    def to_utc(self, local: datetime) -> datetime:
        if local.tzinfo is not None:
            raise ValueError("Expected a naive tenant-local wall-clock value")
        return local.replace(tzinfo=self.tzinfo).astimezone(timezone.utc)

    def to_local(self, instant: datetime) -> datetime:
        # Backends without timezone storage (SQLite) hand back naive UTC.
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.tzinfo).replace(tzinfo=None)

    def format_hhmm(self, instant: datetime) -> str:
        return self.to_local(instant).strftime("%H:%M")

    def parse_hhmm(self, day: date, value: str) -> datetime:
        """Local ``HH:MM`` on ``day`` -> absolute UTC instant."""
        minutes = hhmm_to_minutes(value)
        local = datetime.combine(day, time(minutes // 60, minutes % 60))
        return self.to_utc(local)
