from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.doctor_repository import DoctorRepository
from ..schemas.appointment import AppointmentCondition, AppointmentView
from ..schemas.doctor import DoctorView
from ..scheduling.slots import TimeOfDay, day_bounds


class QueryService:
    """Read-only projections over doctors and appointments.

    Every filter argument is optional; an omitted or blank filter matches
    everything on that dimension and all given filters combine with AND.
    """

    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)

    def filter_doctors(
        self,
        name: Optional[str] = None,
        specialty: Optional[str] = None,
        time_of_day: Optional[TimeOfDay] = None,
    ) -> List[DoctorView]:
        doctors = self.doctors.find_by_name_or_specialty(name, specialty)
        if time_of_day is not None:
            doctors = [
                doctor for doctor in doctors
                if any(pattern.time_of_day == time_of_day for pattern in doctor.patterns)
            ]
        return [DoctorView.model_validate(doctor) for doctor in doctors]

    def filter_patient_appointments(
        self,
        patient_id: int,
        condition: Optional[AppointmentCondition] = None,
        doctor_name: Optional[str] = None,
    ) -> List[AppointmentView]:
        status = condition.status if condition is not None else None
        appointments = self.appointments.find_by_patient(
            patient_id, status=status, doctor_name=(doctor_name or "").strip() or None
        )
        return [AppointmentView.from_appointment(a) for a in appointments]

    def doctor_day_appointments(
        self, doctor_id: int, day: date, patient_name: Optional[str] = None
    ) -> List[AppointmentView]:
        start_of_day, end_of_day = day_bounds(day)
        appointments = self.appointments.find_for_doctor_day(
            doctor_id, start_of_day, end_of_day, (patient_name or "").strip() or None
        )
        return [AppointmentView.from_appointment(a) for a in appointments]
