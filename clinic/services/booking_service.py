from datetime import datetime
from typing import Callable, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.appointment import Appointment, AppointmentStatus
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.patient_repository import PatientRepository
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from ..scheduling.results import BookingResult, BookingStatus, ValidationResult
from ..scheduling.slots import TimeInterval
from .availability_service import AvailabilityService
from .conflict_service import ConflictService

logger = logging.getLogger(__name__)


class BookingService:
    """Books, updates, cancels and closes appointments.

    Each operation is one unit of work: the doctor and patient rows are
    locked (``SELECT ... FOR UPDATE``) before the conflict check so that two
    concurrent bookings for the same doctor or patient serialize, and the
    write is committed only if every check passes. Any rejection rolls the
    session back, releasing the locks without persisting anything.

    Expected outcomes are returned as :class:`BookingResult`; nothing here
    raises for not-found, conflict or forbidden cases.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock
        self.appointments = AppointmentRepository(db)
        self.doctors = DoctorRepository(db)
        self.patients = PatientRepository(db)
        self.conflicts = ConflictService(db)
        self.availability = AvailabilityService(db)

    def validate(self, data: AppointmentCreate) -> ValidationResult:
        """Pre-booking check distinguishing missing doctor, taken time and bad input.

        The proposed hour must fit inside one of the doctor's free slots on
        that date and must not overlap the patient's scheduled appointments.
        """
        if data.doctor_id is None or data.start_time is None:
            return ValidationResult.INVALID_INPUT
        if data.start_time <= self.clock():
            return ValidationResult.INVALID_INPUT

        if not self.doctors.get(data.doctor_id):
            return ValidationResult.DOCTOR_NOT_FOUND

        proposed = TimeInterval.for_appointment(data.start_time)
        free_slots = self.availability.resolve(data.doctor_id, data.start_time.date())
        if not any(slot.contains(proposed) for slot in free_slots):
            return ValidationResult.TIME_UNAVAILABLE

        if data.patient_id is not None and self.conflicts.patient_conflicts(
            data.patient_id, data.start_time
        ):
            return ValidationResult.TIME_UNAVAILABLE

        return ValidationResult.VALID

    def book(self, data: AppointmentCreate) -> BookingResult:
        """Create a scheduled appointment if doctor and patient are both free."""
        if data.doctor_id is None or data.patient_id is None:
            return BookingResult(BookingStatus.INVALID_INPUT, "Doctor and patient are required")
        if data.start_time is None:
            return BookingResult(BookingStatus.INVALID_INPUT, "Appointment time is required")
        if data.start_time <= self.clock():
            return BookingResult(BookingStatus.INVALID_INPUT, "Appointment time must be in the future")

        try:
            doctor = self.doctors.get(data.doctor_id, for_update=True)
            if not doctor:
                return self._reject(BookingStatus.NOT_FOUND, f"Doctor {data.doctor_id} not found")

            patient = self.patients.get(data.patient_id, for_update=True)
            if not patient:
                return self._reject(BookingStatus.NOT_FOUND, f"Patient {data.patient_id} not found")

            conflict = self.conflicts.find_conflict(doctor.id, patient.id, data.start_time)
            if conflict:
                return self._reject(BookingStatus.CONFLICT, conflict)

            appointment = self.appointments.add(Appointment(
                doctor_id=doctor.id,
                patient_id=patient.id,
                start_time=data.start_time,
                status=AppointmentStatus.SCHEDULED,
                reason=data.reason,
            ))
            self.db.commit()
            self.db.refresh(appointment)
        except SQLAlchemyError as e:
            return self._fail("booking appointment", e)

        logger.info(
            f"Booked appointment {appointment.id}: doctor {appointment.doctor_id}, "
            f"patient {appointment.patient_id} at {appointment.start_time}"
        )
        return BookingResult(BookingStatus.CREATED, "Appointment booked successfully", appointment)

    def update(
        self,
        appointment_id: int,
        data: AppointmentUpdate,
        caller_id: Optional[int] = None,
    ) -> BookingResult:
        """Move or reassign a scheduled appointment.

        Doctor and patient are always re-fetched by ID, so a reference deleted
        since the appointment was booked is reported as not found rather than
        written back. With `caller_id` set, only the booking patient may update
        and the appointment cannot be handed to another patient.
        """
        try:
            appointment = self.appointments.get(appointment_id)
            if not appointment:
                return self._reject(BookingStatus.NOT_FOUND, f"Appointment {appointment_id} not found")
            if caller_id is not None and appointment.patient_id != caller_id:
                return self._reject(BookingStatus.FORBIDDEN, "You are not allowed to update this appointment")
            if caller_id is not None and data.patient_id is not None and data.patient_id != caller_id:
                return self._reject(
                    BookingStatus.FORBIDDEN, "You cannot move an appointment to another patient"
                )
            if appointment.status != AppointmentStatus.SCHEDULED:
                return self._reject(
                    BookingStatus.INVALID_INPUT,
                    f"Only scheduled appointments can be updated, this one is {appointment.status.value}",
                )

            start_time = data.start_time or appointment.start_time
            if data.start_time is not None and start_time <= self.clock():
                return self._reject(BookingStatus.INVALID_INPUT, "Appointment time must be in the future")

            doctor_id = data.doctor_id if data.doctor_id is not None else appointment.doctor_id
            patient_id = data.patient_id if data.patient_id is not None else appointment.patient_id

            doctor = self.doctors.get(doctor_id, for_update=True)
            if not doctor:
                return self._reject(BookingStatus.NOT_FOUND, f"Doctor {doctor_id} not found")
            patient = self.patients.get(patient_id, for_update=True)
            if not patient:
                return self._reject(BookingStatus.NOT_FOUND, f"Patient {patient_id} not found")

            conflict = self.conflicts.find_conflict(
                doctor.id, patient.id, start_time, exclude_id=appointment.id
            )
            if conflict:
                return self._reject(BookingStatus.CONFLICT, conflict)

            appointment.doctor_id = doctor.id
            appointment.patient_id = patient.id
            appointment.start_time = start_time
            if data.reason is not None:
                appointment.reason = data.reason
            self.db.commit()
            self.db.refresh(appointment)
        except SQLAlchemyError as e:
            return self._fail("updating appointment", e)

        logger.info(f"Updated appointment {appointment.id} to {appointment.start_time}")
        return BookingResult(BookingStatus.UPDATED, "Appointment updated successfully", appointment)

    def cancel(
        self, appointment_id: int, caller_id: int, reason: Optional[str] = None
    ) -> BookingResult:
        """Soft-cancel: the row is kept with status CANCELLED and frees its slot."""
        try:
            appointment = self.appointments.get(appointment_id)
            if not appointment:
                return self._reject(BookingStatus.NOT_FOUND, f"Appointment {appointment_id} not found")
            if appointment.patient_id != caller_id:
                logger.warning(
                    f"Patient {caller_id} tried to cancel appointment {appointment_id} "
                    f"of patient {appointment.patient_id}"
                )
                return self._reject(BookingStatus.FORBIDDEN, "You are not allowed to cancel this appointment")
            if not appointment.can_transition_to(AppointmentStatus.CANCELLED):
                return self._reject(
                    BookingStatus.INVALID_INPUT,
                    f"Appointment is already {appointment.status.value}",
                )

            appointment.status = AppointmentStatus.CANCELLED
            appointment.cancelled_at = self.clock()
            appointment.cancelled_reason = reason
            self.db.commit()
            self.db.refresh(appointment)
        except SQLAlchemyError as e:
            return self._fail("cancelling appointment", e)

        logger.info(f"Cancelled appointment {appointment.id}")
        return BookingResult(BookingStatus.CANCELLED, "Appointment cancelled successfully", appointment)

    def change_status(
        self, appointment_id: int, new_status: AppointmentStatus, doctor_id: int
    ) -> BookingResult:
        """Let the appointment's doctor mark it completed or no-show."""
        if new_status not in (AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW):
            return BookingResult(
                BookingStatus.INVALID_INPUT,
                "Doctors can only mark appointments as completed or no-show",
            )
        try:
            appointment = self.appointments.get(appointment_id)
            if not appointment:
                return self._reject(BookingStatus.NOT_FOUND, f"Appointment {appointment_id} not found")
            if appointment.doctor_id != doctor_id:
                return self._reject(BookingStatus.FORBIDDEN, "You are not this appointment's doctor")
            if not appointment.can_transition_to(new_status):
                return self._reject(
                    BookingStatus.INVALID_INPUT,
                    f"Cannot change a {appointment.status.value} appointment to {new_status.value}",
                )

            appointment.status = new_status
            self.db.commit()
            self.db.refresh(appointment)
        except SQLAlchemyError as e:
            return self._fail("changing appointment status", e)

        logger.info(f"Appointment {appointment.id} marked {new_status.value}")
        return BookingResult(BookingStatus.STATUS_CHANGED, f"Appointment marked {new_status.value}", appointment)

    def _reject(self, status: BookingStatus, message: str) -> BookingResult:
        self.db.rollback()
        logger.info(f"Appointment request rejected ({status.value}): {message}")
        return BookingResult(status, message)

    def _fail(self, action: str, error: SQLAlchemyError) -> BookingResult:
        self.db.rollback()
        logger.error(f"Database error while {action}: {error}")
        return BookingResult(BookingStatus.ERROR, f"Internal error while {action}")
