from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_admin_user
from ...models.user import User
from ...schemas.doctor import AvailabilityResponse, DoctorCreate, DoctorUpdate, DoctorView
from ...scheduling.slots import TimeOfDay
from ...services.availability_service import AvailabilityService
from ...services.doctor_service import DoctorService
from ...services.query_service import QueryService

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=List[DoctorView])
async def filter_doctors(
    name: Optional[str] = None,
    specialty: Optional[str] = None,
    time: Optional[str] = Query(default=None, description="AM or PM"),
    db: Session = Depends(get_db)
):
    """Search doctors by name, specialty and AM/PM availability."""
    try:
        time_of_day = TimeOfDay.parse(time)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return QueryService(db).filter_doctors(name, specialty, time_of_day)

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: int,
    date: date,
    db: Session = Depends(get_db)
):
    """Free slots of a doctor on a date."""
    slots = AvailabilityService(db).resolve(doctor_id, date)
    return AvailabilityResponse(
        doctor_id=doctor_id,
        date=date,
        slots=[slot.label for slot in slots]
    )

@router.post("", response_model=DoctorView, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """Add a doctor (admin only)."""
    return DoctorView.model_validate(DoctorService(db).create_doctor(doctor_data))

@router.put("/{doctor_id}", response_model=DoctorView)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """Update a doctor's details or availability (admin only)."""
    return DoctorView.model_validate(DoctorService(db).update_doctor(doctor_id, doctor_data))

@router.delete("/{doctor_id}")
async def delete_doctor(
    doctor_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    """Delete a doctor and their appointments (admin only)."""
    DoctorService(db).delete_doctor(doctor_id)
    return {"message": "Doctor deleted successfully"}
