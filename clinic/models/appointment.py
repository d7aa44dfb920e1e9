from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base
from ..scheduling.slots import TimeInterval, time_of_day

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

# Allowed status transitions; every other state is terminal
STATUS_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    },
}

# Statuses that keep occupying the doctor's calendar. A cancelled booking
# frees its slot; completed and no-show visits still consume it.
SLOT_BLOCKING_STATUSES = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
})

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    # Appointment details; the end is always start + the fixed duration
    start_time = Column(DateTime, nullable=False, index=True)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime, nullable=True)
    cancelled_reason = Column(String(255), nullable=True)

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.for_appointment(self.start_time)

    @property
    def end_time(self):
        return self.interval.end

    @property
    def appointment_date(self):
        return self.start_time.date()

    @property
    def appointment_time_only(self):
        return self.start_time.time()

    @property
    def time_of_day(self):
        return time_of_day(self.start_time.time())

    def can_transition_to(self, new_status: AppointmentStatus) -> bool:
        return new_status in STATUS_TRANSITIONS.get(self.status, set())

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, start='{self.start_time}')>"
