"""Patient repository - Database operations for patients"""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.patient import Patient


class PatientRepository:
    """Repository for patient database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, patient_id: Optional[int], for_update: bool = False) -> Optional[Patient]:
        """Get a patient by ID, optionally locking the row until commit"""
        if patient_id is None:
            return None
        query = self.db.query(Patient).filter(Patient.id == patient_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_by_user_id(self, user_id: int) -> Optional[Patient]:
        """Get the patient profile of a user"""
        return self.db.query(Patient).filter(Patient.user_id == user_id).first()
