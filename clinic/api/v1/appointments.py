from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_doctor, get_current_patient, raise_for_result
from ...models.doctor import Doctor
from ...models.patient import Patient
from ...schemas.appointment import (
    AppointmentCreate, AppointmentStatusUpdate, AppointmentUpdate,
    AppointmentView, BookingResponse
)
from ...scheduling.results import BookingResult, ValidationResult
from ...services.booking_service import BookingService
from ...services.query_service import QueryService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def _booking_response(result: BookingResult) -> BookingResponse:
    raise_for_result(result)
    return BookingResponse(
        message=result.message,
        appointment=AppointmentView.from_appointment(result.appointment)
    )

@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    patient: Patient = Depends(get_current_patient)
):
    """Book an appointment for the calling patient."""
    # Patients always book for themselves
    appointment_data = appointment_data.model_copy(update={"patient_id": patient.id})
    booking_service = BookingService(db)

    validation = booking_service.validate(appointment_data)
    if validation == ValidationResult.DOCTOR_NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Doctor not found for the specified appointment"
        )
    if validation == ValidationResult.TIME_UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Appointment time is unavailable for the selected doctor "
                   "or you already have an overlapping appointment"
        )
    if validation == ValidationResult.INVALID_INPUT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A doctor and a future appointment time are required"
        )

    return _booking_response(booking_service.book(appointment_data))

@router.put("/{appointment_id}", response_model=BookingResponse)
async def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
    patient: Patient = Depends(get_current_patient)
):
    """Reschedule one of the calling patient's appointments."""
    result = BookingService(db).update(appointment_id, appointment_data, caller_id=patient.id)
    return _booking_response(result)

@router.delete("/{appointment_id}", response_model=BookingResponse)
async def cancel_appointment(
    appointment_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    patient: Patient = Depends(get_current_patient)
):
    """Cancel one of the calling patient's appointments."""
    result = BookingService(db).cancel(appointment_id, patient.id, reason)
    return _booking_response(result)

@router.patch("/{appointment_id}/status", response_model=BookingResponse)
async def change_appointment_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor)
):
    """Mark one of the calling doctor's appointments completed or no-show."""
    result = BookingService(db).change_status(appointment_id, status_data.status, doctor.id)
    return _booking_response(result)

@router.get("/doctor", response_model=List[AppointmentView])
async def get_doctor_appointments(
    date: date,
    patient_name: Optional[str] = None,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor)
):
    """The calling doctor's appointments on a date."""
    if patient_name and patient_name.strip().lower() == "all":
        patient_name = None
    return QueryService(db).doctor_day_appointments(doctor.id, date, patient_name)
