from typing import Optional

from pydantic import BaseModel, Field


class PrescriptionCreate(BaseModel):
    appointment_id: int
    patient_name: str = Field(min_length=3, max_length=100)
    medication: str = Field(min_length=3, max_length=100)
    dosage: str = Field(min_length=3, max_length=20)
    doctor_notes: Optional[str] = Field(default=None, max_length=200)


class PrescriptionResponse(PrescriptionCreate):
    id: str
