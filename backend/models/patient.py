"""Patient model definitions."""

import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, Integer, String, UniqueConstraint

from backend.database import Base
from backend.models.credentials import Credentialed


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Patient(Credentialed, Base):
    """Represents a patient who books and owns appointments."""
    __tablename__ = "patients"
    __table_args__ = (
        UniqueConstraint("phone", name="uk_patient_phone"),
        UniqueConstraint("email", name="uk_patient_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(Enum(Gender, name="gender"), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(100))
    address = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def display_name(self) -> str:
        return self.full_name
