"""Doctor repository - Database operations for doctors"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models.doctor import Doctor


class DoctorRepository:
    """Repository for doctor database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, doctor_id: Optional[int], for_update: bool = False) -> Optional[Doctor]:
        """Get a doctor by ID, optionally locking the row until commit"""
        if doctor_id is None:
            return None
        query = self.db.query(Doctor).filter(Doctor.id == doctor_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_by_user_id(self, user_id: int) -> Optional[Doctor]:
        """Get the doctor profile of a user"""
        return self.db.query(Doctor).filter(Doctor.user_id == user_id).first()

    def find_by_name_or_specialty(
        self, name: Optional[str] = None, specialty: Optional[str] = None
    ) -> List[Doctor]:
        """Get doctors whose full name contains `name` and whose specialty equals `specialty`

        Both comparisons are case-insensitive; a blank argument matches everything.
        """
        query = self.db.query(Doctor).options(joinedload(Doctor.user))
        if name:
            full_name = func.lower(Doctor.first_name + " " + Doctor.last_name)
            query = query.filter(full_name.contains(name.strip().lower(), autoescape=True))
        if specialty:
            query = query.filter(func.lower(Doctor.specialty) == specialty.strip().lower())
        return query.order_by(Doctor.id).all()
