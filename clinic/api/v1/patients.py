from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_patient
from ...models.patient import Patient
from ...schemas.appointment import AppointmentCondition, AppointmentView
from ...schemas.patient import PatientResponse
from ...services.query_service import QueryService

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.get("/me", response_model=PatientResponse)
async def get_patient_details(
    patient: Patient = Depends(get_current_patient)
):
    """The calling patient's profile."""
    return PatientResponse.model_validate(patient)

@router.get("/me/appointments", response_model=List[AppointmentView])
async def get_patient_appointments(
    condition: Optional[AppointmentCondition] = None,
    doctor_name: Optional[str] = None,
    db: Session = Depends(get_db),
    patient: Patient = Depends(get_current_patient)
):
    """The calling patient's appointments, optionally past/future and by doctor name."""
    return QueryService(db).filter_patient_appointments(patient.id, condition, doctor_name)
