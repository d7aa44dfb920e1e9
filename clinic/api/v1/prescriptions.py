from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db, get_redis
from ...api.deps import get_current_doctor
from ...models.doctor import Doctor
from ...schemas.prescription import PrescriptionCreate, PrescriptionResponse
from ...services.prescription_service import PrescriptionService

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def save_prescription(
    prescription_data: PrescriptionCreate,
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis),
    doctor: Doctor = Depends(get_current_doctor)
):
    """Write a prescription for one of the calling doctor's appointments."""
    return PrescriptionService(db, redis_client).save_prescription(prescription_data, doctor.id)

@router.get("/{appointment_id}", response_model=List[PrescriptionResponse])
async def get_prescriptions(
    appointment_id: int,
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis),
    _: Doctor = Depends(get_current_doctor)
):
    """Prescriptions written for an appointment."""
    prescriptions = PrescriptionService(db, redis_client).get_prescriptions(appointment_id)
    if not prescriptions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No prescriptions found for appointment {appointment_id}"
        )
    return prescriptions
