"""
Slot generation and conflict filtering.

Both functions here are pure: they take every input explicitly (including
"now") and never touch the database or the clock. Times are integer minutes
since local midnight on the tenant's wall clock.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence

from app.utils.wallclock import time_to_minutes


@dataclass(frozen=True)
class Interval:
    """Half-open interval [start, end) in minutes."""

    start: int
    end: int

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class DayWindow:
    """One day's working window, optionally split by a lunch break."""

    start: int
    end: int
    lunch_start: Optional[int] = None
    lunch_end: Optional[int] = None

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"Window start must precede end ({self.start} >= {self.end})")
        if (self.lunch_start is None) != (self.lunch_end is None):
            raise ValueError("Lunch start and end must both be set or both be empty")
        if self.lunch_start is not None and not (
            self.start <= self.lunch_start < self.lunch_end <= self.end
        ):
            raise ValueError("Lunch break must lie inside the working window")

    @property
    def lunch(self) -> Optional[Interval]:
        if self.lunch_start is None:
            return None
        return Interval(self.lunch_start, self.lunch_end)

    @classmethod
    def from_times(
        cls,
        start: time,
        end: time,
        lunch_start: Optional[time] = None,
        lunch_end: Optional[time] = None,
    ) -> "DayWindow":
        return cls(
            start=time_to_minutes(start),
            end=time_to_minutes(end),
            lunch_start=time_to_minutes(lunch_start) if lunch_start else None,
            lunch_end=time_to_minutes(lunch_end) if lunch_end else None,
        )


def generate_slots(
    window: Optional[DayWindow],
    day: date,
    now: datetime,
    granularity: int = 30,
    service_duration: Optional[int] = None,
) -> List[int]:
    """
    Candidate start times for ``day``, ascending and de-duplicated.

    Boundaries run from the window start (rounded up to the granularity) to
    the closing time inclusive; a closing time off the granularity grid is
    appended verbatim. A candidate is dropped when:
      - its [s, s + granularity) cell touches the lunch break,
      - it is not strictly after ``now`` (naive tenant-local),
      - ``service_duration`` is given and the service would end after closing.

    No window means the professional does not work that day: empty result.
    """
    if window is None:
        return []

    first = -(-window.start // granularity) * granularity
    boundaries = list(range(first, window.end + 1, granularity))
    if window.end % granularity and window.end not in boundaries:
        boundaries.append(window.end)

    lunch = window.lunch
    midnight = datetime.combine(day, time())
    slots: List[int] = []
    for start in boundaries:
        if lunch and Interval(start, start + granularity).overlaps(lunch):
            continue
        if midnight + timedelta(minutes=start) <= now:
            continue
        if service_duration is not None and start + service_duration > window.end:
            continue
        if not slots or slots[-1] != start:
            slots.append(start)
    return slots


def filter_conflicts(
    candidates: Sequence[int],
    duration: int,
    busy: Iterable[Interval],
) -> List[int]:
    """
    Keep the candidates whose [s, s + duration) interval overlaps nothing in
    ``busy``. Order is preserved.
    """
    busy = list(busy)
    return [
        start
        for start in candidates
        if not any(Interval(start, start + duration).overlaps(b) for b in busy)
    ]
