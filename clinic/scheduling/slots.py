"""
Time-slot value types shared by the scheduling services.

Doctor availability is declared as recurring, date-less patterns written
``"HH:MM - HH:MM"``. They are parsed into :class:`SlotPattern` values once,
then materialized onto a calendar date as :class:`TimeInterval` instances
when free slots or conflicts are computed. All intervals are half-open
``[start, end)``, so touching endpoints never overlap.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple
import logging

from ..core.config import settings

logger = logging.getLogger(__name__)

PATTERN_SEPARATOR = " - "
TIME_FORMAT = "%H:%M"
NOON = time(12, 0)

# Every appointment lasts exactly this long
APPOINTMENT_DURATION = timedelta(minutes=settings.APPOINTMENT_DURATION_MINUTES)


class SlotParseError(ValueError):
    """Raised when an availability pattern cannot be parsed."""


class TimeOfDay(str, Enum):
    AM = "AM"
    PM = "PM"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TimeOfDay"]:
        """Case-insensitive lookup; blank means no bucket."""
        if value is None or not value.strip():
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(f"Time of day must be 'AM' or 'PM', got {value!r}")


def time_of_day(start: time) -> TimeOfDay:
    """AM when the start is strictly before noon, PM otherwise."""
    return TimeOfDay.AM if start < NOON else TimeOfDay.PM


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and self.end > other.start

    @classmethod
    def for_appointment(cls, start: datetime) -> "TimeInterval":
        return cls(start, start + APPOINTMENT_DURATION)


@dataclass(frozen=True)
class SlotPattern:
    """A recurring daily availability window."""

    start: time
    end: time

    def __post_init__(self):
        if self.end <= self.start:
            raise SlotParseError(
                f"Slot end {self.end:%H:%M} must be after start {self.start:%H:%M}"
            )

    @classmethod
    def parse(cls, raw: str) -> "SlotPattern":
        if not isinstance(raw, str):
            raise SlotParseError(f"Slot pattern must be a string, got {type(raw).__name__}")
        parts = raw.split(PATTERN_SEPARATOR.strip())
        if len(parts) != 2:
            raise SlotParseError(f"Slot pattern {raw!r} is not 'HH:MM - HH:MM'")
        try:
            start, end = (datetime.strptime(part.strip(), TIME_FORMAT).time() for part in parts)
        except ValueError:
            raise SlotParseError(f"Slot pattern {raw!r} has an invalid time")
        return cls(start, end)

    def on(self, day: date) -> TimeInterval:
        """Materialize the pattern onto a calendar date."""
        return TimeInterval(datetime.combine(day, self.start), datetime.combine(day, self.end))

    @property
    def time_of_day(self) -> TimeOfDay:
        return time_of_day(self.start)

    def __str__(self):
        return f"{self.start:%H:%M}{PATTERN_SEPARATOR}{self.end:%H:%M}"


@dataclass(frozen=True)
class Slot:
    """A free, bookable interval of a doctor's pattern on one date."""

    date: date
    start: time
    end: time

    @classmethod
    def from_pattern(cls, pattern: SlotPattern, day: date) -> "Slot":
        return cls(day, pattern.start, pattern.end)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(datetime.combine(self.date, self.start), datetime.combine(self.date, self.end))

    def contains(self, interval: TimeInterval) -> bool:
        own = self.interval
        return own.start <= interval.start and interval.end <= own.end

    @property
    def label(self) -> str:
        return f"{self.start:%H:%M}{PATTERN_SEPARATOR}{self.end:%H:%M}"


def parse_patterns(raw_patterns: Iterable[str], owner: Optional[str] = None) -> List[SlotPattern]:
    """Parse patterns in order, skipping and logging malformed ones."""
    patterns = []
    for raw in raw_patterns or ():
        try:
            patterns.append(SlotPattern.parse(raw))
        except SlotParseError as e:
            logger.warning(f"Skipping availability pattern for {owner or 'unknown'}: {e}")
    return patterns


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar date, both inclusive."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)
