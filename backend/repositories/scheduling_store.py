"""Storage contract used by the scheduling core, and its SQLAlchemy implementation."""

import logging
from datetime import datetime
from typing import Protocol

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models.admin import Admin
from backend.models.appointment import Appointment
from backend.models.clinic_location import ClinicLocation
from backend.models.doctor import Doctor
from backend.models.patient import Patient
from backend.services.errors import StateConflict

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = 'Time slot already booked for doctor.'


class SchedulingStore(Protocol):
    def find_admin_by_id(self, admin_id: int) -> Admin | None: ...

    def find_doctor_by_id(self, doctor_id: int) -> Doctor | None: ...

    def find_patient_by_id(self, patient_id: int) -> Patient | None: ...

    def find_clinic_location_by_id(self, clinic_location_id: int) -> ClinicLocation | None: ...

    def find_appointment_by_id(self, appointment_id: int) -> Appointment | None: ...

    def find_admin_by_login(self, username_or_email: str) -> Admin | None: ...

    def find_patient_by_email(self, email: str) -> Patient | None: ...

    def doctor_has_appointment_at(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: int | None = None,
    ) -> bool: ...

    def save(self, appointment: Appointment) -> Appointment: ...

    def find_appointments_for_doctor_between(
        self,
        doctor_id: int,
        start: datetime,
        end_exclusive: datetime,
        patient_name: str | None = None,
    ) -> list[Appointment]: ...

    def find_appointments_for_patient(
        self,
        patient_id: int,
        doctor_name: str | None = None,
        status: int | None = None,
    ) -> list[Appointment]: ...


def name_matches(first_name_column, last_name_column, fragment: str):
    needle = fragment.strip().lower()
    return or_(
        func.lower(first_name_column).contains(needle, autoescape=True),
        func.lower(last_name_column).contains(needle, autoescape=True),
    )


def _is_slot_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    if 'uk_appointment_doctor_time' in message:
        return True
    return 'unique' in message and 'appointment_time' in message


class SqlSchedulingStore:
    def __init__(self, db: Session):
        self.db = db

    def find_admin_by_id(self, admin_id: int) -> Admin | None:
        return self.db.get(Admin, admin_id)

    def find_doctor_by_id(self, doctor_id: int) -> Doctor | None:
        return self.db.get(Doctor, doctor_id)

    def find_patient_by_id(self, patient_id: int) -> Patient | None:
        return self.db.get(Patient, patient_id)

    def find_clinic_location_by_id(self, clinic_location_id: int) -> ClinicLocation | None:
        return self.db.get(ClinicLocation, clinic_location_id)

    def find_appointment_by_id(self, appointment_id: int) -> Appointment | None:
        return self.db.get(Appointment, appointment_id)

    def find_admin_by_login(self, username_or_email: str) -> Admin | None:
        admin = self.db.query(Admin).filter(Admin.username == username_or_email).first()
        if admin is None:
            admin = self.db.query(Admin).filter(Admin.email == username_or_email).first()
        return admin

    def find_patient_by_email(self, email: str) -> Patient | None:
        return self.db.query(Patient).filter(Patient.email == email).first()

    def doctor_has_appointment_at(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: int | None = None,
    ) -> bool:
        query = self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time == appointment_time,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.first() is not None

    def save(self, appointment: Appointment) -> Appointment:
        """Persist ``appointment``; a lost race on the doctor/time slot becomes ``StateConflict``."""
        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_slot_conflict(exc):
                logger.info(
                    'Slot uniqueness constraint rejected appointment for doctor %s at %s',
                    appointment.doctor_id,
                    appointment.appointment_time,
                )
                raise StateConflict(SLOT_TAKEN_MESSAGE) from exc
            raise
        self.db.refresh(appointment)
        return appointment

    def find_appointments_for_doctor_between(
        self,
        doctor_id: int,
        start: datetime,
        end_exclusive: datetime,
        patient_name: str | None = None,
    ) -> list[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time < end_exclusive,
        )
        if patient_name:
            query = query.join(Patient, Appointment.patient_id == Patient.id).filter(
                name_matches(Patient.first_name, Patient.last_name, patient_name)
            )
        return query.order_by(Appointment.appointment_time.asc()).all()

    def find_appointments_for_patient(
        self,
        patient_id: int,
        doctor_name: str | None = None,
        status: int | None = None,
    ) -> list[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == status)

        if doctor_name:
            query = query.join(Doctor, Appointment.doctor_id == Doctor.id).filter(
                name_matches(Doctor.first_name, Doctor.last_name, doctor_name)
            )
            return query.order_by(Appointment.appointment_time.desc()).all()

        if status is not None:
            return query.order_by(Appointment.appointment_time.asc()).all()

        return query.order_by(Appointment.id.asc()).all()
