"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient


class AppointmentRepository:
    """Repository for appointment database operations"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.doctor).joinedload(Doctor.user),
            joinedload(Appointment.patient).joinedload(Patient.user),
        )

    def get(self, appointment_id: int) -> Optional[Appointment]:
        """Get an appointment by ID"""
        return self._query().filter(Appointment.id == appointment_id).first()

    def find_by_doctor_in_range(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[Appointment]:
        """Get a doctor's appointments starting within [start, end], oldest first"""
        query = self._query().filter(
            Appointment.doctor_id == doctor_id,
            Appointment.start_time >= start,
            Appointment.start_time <= end,
        )
        if statuses is not None:
            query = query.filter(Appointment.status.in_(list(statuses)))
        return query.order_by(Appointment.start_time.asc()).all()

    def find_by_patient_and_status(
        self, patient_id: int, status: AppointmentStatus
    ) -> List[Appointment]:
        """Get a patient's appointments with the given status, oldest first"""
        return (
            self._query()
            .filter(Appointment.patient_id == patient_id, Appointment.status == status)
            .order_by(Appointment.start_time.asc())
            .all()
        )

    def find_by_patient(
        self,
        patient_id: int,
        status: Optional[AppointmentStatus] = None,
        doctor_name: Optional[str] = None,
    ) -> List[Appointment]:
        """Get a patient's appointments, optionally by status and doctor name"""
        query = self._query().filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if doctor_name:
            doctor_full_name = func.lower(Doctor.first_name + " " + Doctor.last_name)
            query = query.join(Appointment.doctor).filter(
                doctor_full_name.contains(doctor_name.lower(), autoescape=True)
            )
        return query.order_by(Appointment.start_time.asc()).all()

    def find_for_doctor_day(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime,
        patient_name: Optional[str] = None,
    ) -> List[Appointment]:
        """Get a doctor's appointments in a day window, optionally by patient name"""
        query = self._query().filter(
            Appointment.doctor_id == doctor_id,
            Appointment.start_time >= start,
            Appointment.start_time <= end,
        )
        if patient_name:
            patient_full_name = func.lower(Patient.first_name + " " + Patient.last_name)
            query = query.join(Appointment.patient).filter(
                patient_full_name.contains(patient_name.lower(), autoescape=True)
            )
        return query.order_by(Appointment.start_time.asc()).all()

    def add(self, appointment: Appointment) -> Appointment:
        """Stage a new appointment; the caller owns the transaction"""
        self.db.add(appointment)
        self.db.flush()
        return appointment
