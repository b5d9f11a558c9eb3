"""Appointment model definitions."""

import enum
from datetime import date, datetime, time, timedelta

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.database import Base

APPOINTMENT_DURATION = timedelta(hours=1)


class AppointmentStatus(enum.IntEnum):
    SCHEDULED = 0
    COMPLETED = 1
    CANCELLED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


def status_label(status: int | None) -> str:
    try:
        return AppointmentStatus(status).label
    except ValueError:
        return "Unknown"


class Appointment(Base):
    """Represents a scheduled appointment.

    A doctor can hold at most one appointment per exact ``appointment_time``;
    the unique constraint is what makes concurrent bookings for the same slot
    lose, so it covers every status.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("doctor_id", "appointment_time", name="uk_appointment_doctor_time"),
        Index("idx_appointments_patient_time", "patient_id", "appointment_time"),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", name="fk_appointment_doctor"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id", name="fk_appointment_patient"), nullable=False)
    clinic_location_id = Column(
        Integer,
        ForeignKey("clinic_locations.id", name="fk_appointment_clinic_location"),
        nullable=False,
    )
    appointment_time = Column(DateTime, nullable=False)
    status = Column(Integer, nullable=False, default=AppointmentStatus.SCHEDULED.value)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    doctor = relationship("Doctor")
    patient = relationship("Patient")
    clinic_location = relationship("ClinicLocation")

    @property
    def end_time(self) -> datetime | None:
        if self.appointment_time is None:
            return None
        return self.appointment_time + APPOINTMENT_DURATION

    @property
    def appointment_date(self) -> date | None:
        return self.appointment_time.date() if self.appointment_time else None

    @property
    def appointment_time_only(self) -> time | None:
        return self.appointment_time.time() if self.appointment_time else None

    @property
    def is_scheduled(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED

    @property
    def is_completed(self) -> bool:
        return self.status == AppointmentStatus.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED
