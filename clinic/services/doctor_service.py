import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import UserRole
from ..models.doctor import Doctor
from ..repositories.doctor_repository import DoctorRepository
from ..schemas.doctor import DoctorCreate, DoctorUpdate
from .auth_service import AuthService

logger = logging.getLogger(__name__)


class DoctorService:
    """Admin-side management of doctor accounts and their availability."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository(db)

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.repo.get(doctor_id)
        if not doctor:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
        return doctor

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        """Create the doctor's login and profile together."""
        user = AuthService(self.db).create_user(data.email, data.password, UserRole.DOCTOR)
        user.doctor = Doctor(
            first_name=data.first_name,
            last_name=data.last_name,
            specialty=data.specialty,
            license_number=data.license_number,
            phone_number=data.phone_number,
            office_address=data.office_address,
            qualification=data.qualification,
            bio=data.bio,
            available_times=list(data.available_times),
        )
        self.db.commit()
        self.db.refresh(user.doctor)

        logger.info(f"Created doctor {user.doctor.id} ({user.doctor.specialty})")
        return user.doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate) -> Doctor:
        """Apply the provided fields; new availability applies to the next lookup."""
        doctor = self.get_doctor(doctor_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if field == "available_times":
                # Assign a fresh list so the JSON column is flagged dirty
                value = list(value)
            setattr(doctor, field, value)

        self.db.commit()
        self.db.refresh(doctor)

        logger.info(f"Updated doctor {doctor.id}")
        return doctor

    def delete_doctor(self, doctor_id: int) -> None:
        """Delete a doctor, their login and all their appointments."""
        doctor = self.get_doctor(doctor_id)
        user = doctor.user

        # Doctor.appointments cascades, so the rows go in the same transaction
        self.db.delete(user if user else doctor)
        self.db.commit()

        logger.info(f"Deleted doctor {doctor_id} and their appointments")
