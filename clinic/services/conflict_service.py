from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.appointment import Appointment, AppointmentStatus, SLOT_BLOCKING_STATUSES
from ..repositories.appointment_repository import AppointmentRepository
from ..scheduling.slots import APPOINTMENT_DURATION, TimeInterval

logger = logging.getLogger(__name__)


def overlapping(
    existing: Iterable[Appointment],
    proposed: TimeInterval,
    exclude_id: Optional[int] = None,
) -> List[Appointment]:
    """Appointments from `existing` whose interval overlaps `proposed`.

    `exclude_id` drops the appointment being edited so it cannot conflict
    with its own prior booking.
    """
    return [
        appointment
        for appointment in existing
        if (exclude_id is None or appointment.id != exclude_id)
        and appointment.interval.overlaps(proposed)
    ]


def has_conflict(
    existing: Iterable[Appointment],
    proposed: TimeInterval,
    exclude_id: Optional[int] = None,
) -> bool:
    return bool(overlapping(existing, proposed, exclude_id))


class ConflictService:
    """Detects double bookings for a doctor or a patient.

    The two sides are checked differently: every appointment still holding
    the doctor's calendar counts against the doctor (completed and no-show
    included), while only scheduled appointments count against the patient.
    """

    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.window = max(timedelta(minutes=settings.CONFLICT_WINDOW_MINUTES), APPOINTMENT_DURATION)

    def doctor_conflicts(
        self, doctor_id: int, start: datetime, exclude_id: Optional[int] = None
    ) -> List[Appointment]:
        proposed = TimeInterval.for_appointment(start)
        nearby = self.appointments.find_by_doctor_in_range(
            doctor_id,
            proposed.start - self.window,
            proposed.end + self.window,
            statuses=SLOT_BLOCKING_STATUSES,
        )
        return overlapping(nearby, proposed, exclude_id)

    def patient_conflicts(
        self, patient_id: int, start: datetime, exclude_id: Optional[int] = None
    ) -> List[Appointment]:
        proposed = TimeInterval.for_appointment(start)
        scheduled = self.appointments.find_by_patient_and_status(
            patient_id, AppointmentStatus.SCHEDULED
        )
        return overlapping(scheduled, proposed, exclude_id)

    def find_conflict(
        self,
        doctor_id: int,
        patient_id: Optional[int],
        start: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[str]:
        """Describe the first conflict found, or None when the interval is free."""
        if self.doctor_conflicts(doctor_id, start, exclude_id):
            logger.info(f"Doctor {doctor_id} is already booked at {start}")
            return "Doctor is not available at the requested time"
        if patient_id is not None and self.patient_conflicts(patient_id, start, exclude_id):
            logger.info(f"Patient {patient_id} already has an appointment at {start}")
            return "Patient already has an appointment during the requested time"
        return None
