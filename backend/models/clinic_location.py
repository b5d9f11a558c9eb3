"""Clinic location model definitions."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from backend.database import Base


class ClinicLocation(Base):
    """Represents a physical clinic where appointments take place."""
    __tablename__ = "clinic_locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(20))
    email = Column(String(100))

    doctors = relationship("Doctor", back_populates="clinic_location")
