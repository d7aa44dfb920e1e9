"""Doctor schemas - Pydantic models for doctor management and search"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..scheduling.slots import SlotParseError, SlotPattern


def _normalize_patterns(patterns: Optional[List[str]]) -> Optional[List[str]]:
    if patterns is None:
        return None
    normalized = []
    for raw in patterns:
        try:
            normalized.append(str(SlotPattern.parse(raw)))
        except SlotParseError as e:
            raise ValueError(str(e))
    return normalized


class DoctorCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    specialty: str = Field(min_length=2, max_length=100)
    license_number: Optional[str] = Field(default=None, max_length=50)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    office_address: Optional[str] = None
    qualification: Optional[str] = None
    bio: Optional[str] = None
    available_times: List[str] = Field(default_factory=list)

    @field_validator("available_times")
    @classmethod
    def validate_available_times(cls, v):
        return _normalize_patterns(v)


class DoctorUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    specialty: Optional[str] = Field(default=None, min_length=2, max_length=100)
    license_number: Optional[str] = Field(default=None, max_length=50)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    office_address: Optional[str] = None
    qualification: Optional[str] = None
    bio: Optional[str] = None
    available_times: Optional[List[str]] = None

    @field_validator("available_times")
    @classmethod
    def validate_available_times(cls, v):
        return _normalize_patterns(v)


class DoctorView(BaseModel):
    """Doctor row for search results and listings"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    full_name: str
    specialty: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    office_address: Optional[str] = None
    available_times: List[str] = []


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: date
    slots: List[str]
