"""
Prescriptions are loosely structured documents kept in redis, outside the
relational schema. Each one is a JSON string under ``prescription:{id}``
and the ids of an appointment's prescriptions are appended to the list
``appointment:{appointment_id}:prescriptions`` in insertion order.
"""
from typing import List
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..repositories.appointment_repository import AppointmentRepository
from ..schemas.prescription import PrescriptionCreate, PrescriptionResponse

logger = logging.getLogger(__name__)

ID_COUNTER_KEY = "prescription:next_id"


def _document_key(prescription_id: str) -> str:
    return f"prescription:{prescription_id}"


def _index_key(appointment_id: int) -> str:
    return f"appointment:{appointment_id}:prescriptions"


class PrescriptionService:
    def __init__(self, db: Session, redis_client):
        self.db = db
        self.redis = redis_client
        self.appointments = AppointmentRepository(db)

    def save_prescription(self, data: PrescriptionCreate, doctor_id: int) -> PrescriptionResponse:
        """Store a prescription for one of the doctor's own appointments."""
        appointment = self.appointments.get(data.appointment_id)
        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Appointment {data.appointment_id} not found"
            )
        if appointment.doctor_id != doctor_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are not this appointment's doctor"
            )

        prescription = PrescriptionResponse(id=str(self.redis.incr(ID_COUNTER_KEY)), **data.model_dump())

        pipe = self.redis.pipeline()
        pipe.set(_document_key(prescription.id), prescription.model_dump_json())
        pipe.rpush(_index_key(data.appointment_id), prescription.id)
        pipe.execute()

        logger.info(f"Saved prescription {prescription.id} for appointment {data.appointment_id}")
        return prescription

    def get_prescriptions(self, appointment_id: int) -> List[PrescriptionResponse]:
        """All prescriptions of an appointment in the order they were written."""
        ids = self.redis.lrange(_index_key(appointment_id), 0, -1)
        if not ids:
            return []

        documents = self.redis.mget([_document_key(i) for i in ids])
        return [
            PrescriptionResponse.model_validate_json(document)
            for document in documents
            if document is not None
        ]
