from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..scheduling.slots import parse_patterns

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    specialty = Column(String(100), nullable=False, index=True)
    license_number = Column(String(50), nullable=True, unique=True)

    # Professional information
    qualification = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)

    # Contact information
    phone_number = Column(String(20), nullable=True)
    office_address = Column(String(255), nullable=True)

    # Recurring daily availability, ordered, e.g. ["09:00 - 10:00", "14:00 - 15:00"]
    available_times = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor")
    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def email(self):
        return self.user.email if self.user else None

    @property
    def patterns(self):
        """Parsed availability patterns.

        Parsed once per distinct value of ``available_times``; assigning a new
        list invalidates the cached result on next access.
        """
        raw = tuple(self.available_times or ())
        cached = self.__dict__.get("_pattern_cache")
        if cached is None or cached[0] != raw:
            cached = (raw, parse_patterns(raw, owner=f"doctor {self.id}"))
            self.__dict__["_pattern_cache"] = cached
        return cached[1]

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.first_name} {self.last_name}', specialty='{self.specialty}')>"
