from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.appointment import Appointment


class ValidationResult(str, Enum):
    VALID = "valid"
    TIME_UNAVAILABLE = "time_unavailable"
    DOCTOR_NOT_FOUND = "doctor_not_found"
    INVALID_INPUT = "invalid_input"


class BookingStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"
    STATUS_CHANGED = "status_changed"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"
    ERROR = "error"


SUCCESS_STATUSES = frozenset({
    BookingStatus.CREATED,
    BookingStatus.UPDATED,
    BookingStatus.CANCELLED,
    BookingStatus.STATUS_CHANGED,
})


@dataclass
class BookingResult:
    status: BookingStatus
    message: str
    appointment: Optional[Appointment] = None

    @property
    def ok(self) -> bool:
        return self.status in SUCCESS_STATUSES
