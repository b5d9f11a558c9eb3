"""Doctor model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.database import Base


class Doctor(Base):
    """Represents a practitioner that appointments are booked against."""
    __tablename__ = "doctors"
    __table_args__ = (
        UniqueConstraint("phone", name="uk_doctor_phone"),
        UniqueConstraint("email", name="uk_doctor_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    specialty = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(100), nullable=False)
    clinic_location_id = Column(Integer, ForeignKey("clinic_locations.id"))
    active = Column(Boolean, nullable=False, default=True)

    clinic_location = relationship("ClinicLocation", back_populates="doctors")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        # Rows created before the column existed carry NULL and count as active.
        return self.active is None or bool(self.active)
