from datetime import date
from typing import List
import logging

from sqlalchemy.orm import Session

from ..models.appointment import SLOT_BLOCKING_STATUSES
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.doctor_repository import DoctorRepository
from ..scheduling.slots import Slot, day_bounds

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Derives a doctor's free slots on a date from patterns minus bookings."""

    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)

    def resolve(self, doctor_id: int, day: date) -> List[Slot]:
        """Free slots for `doctor_id` on `day`, in declared pattern order.

        An unknown doctor yields an empty list, same as a fully booked one.
        """
        doctor = self.doctors.get(doctor_id)
        if not doctor:
            logger.info(f"Availability requested for unknown doctor {doctor_id}")
            return []

        patterns = doctor.patterns
        if not patterns:
            return []

        start_of_day, end_of_day = day_bounds(day)
        booked = [
            appointment.interval
            for appointment in self.appointments.find_by_doctor_in_range(
                doctor_id, start_of_day, end_of_day, statuses=SLOT_BLOCKING_STATUSES
            )
        ]

        return [
            Slot.from_pattern(pattern, day)
            for pattern in patterns
            if not any(pattern.on(day).overlaps(interval) for interval in booked)
        ]
