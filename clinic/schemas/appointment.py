"""Appointment schemas - Pydantic models for booking requests and views"""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.appointment import AppointmentStatus
from ..scheduling.slots import TimeOfDay


def _to_naive_local(v: Optional[datetime]) -> Optional[datetime]:
    # Appointments are stored as naive local times
    if v is not None and v.tzinfo is not None:
        return v.astimezone().replace(tzinfo=None)
    return v


class AppointmentCondition(str, Enum):
    """Patient-side filter derived from status, never from the clock"""

    PAST = "past"
    FUTURE = "future"

    @property
    def status(self) -> AppointmentStatus:
        if self is AppointmentCondition.PAST:
            return AppointmentStatus.COMPLETED
        return AppointmentStatus.SCHEDULED


class AppointmentCreate(BaseModel):
    """Booking request; missing fields are reported as invalid input by the engine"""

    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None
    start_time: Optional[datetime] = None
    reason: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v):
        return _to_naive_local(v)


class AppointmentUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value"""

    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None
    start_time: Optional[datetime] = None
    reason: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def normalize_start_time(cls, v):
        return _to_naive_local(v)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentView(BaseModel):
    """Flattened appointment row with denormalized doctor/patient fields"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: int
    doctor_name: str
    patient_id: int
    patient_name: str
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_address: Optional[str] = None
    start_time: datetime
    end_time: datetime
    appointment_date: date
    appointment_time_only: time
    time_of_day: TimeOfDay
    status: AppointmentStatus
    reason: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment) -> "AppointmentView":
        doctor = appointment.doctor
        patient = appointment.patient
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            doctor_name=doctor.full_name,
            patient_id=appointment.patient_id,
            patient_name=patient.full_name,
            patient_email=patient.email,
            patient_phone=patient.phone_number,
            patient_address=patient.address,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            appointment_date=appointment.appointment_date,
            appointment_time_only=appointment.appointment_time_only,
            time_of_day=appointment.time_of_day,
            status=appointment.status,
            reason=appointment.reason,
        )


class BookingResponse(BaseModel):
    message: str
    appointment: Optional[AppointmentView] = None
