"""Doctor and patient directory lookups that sit outside the scheduling core."""

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models.clinic_location import ClinicLocation
from backend.models.doctor import Doctor
from backend.models.patient import Patient
from backend.repositories.scheduling_store import name_matches
from backend.services.errors import ValidationFailure


class SqlDirectoryStore:
    def __init__(self, db: Session):
        self.db = db

    def find_doctor_by_id(self, doctor_id: int) -> Doctor | None:
        return self.db.get(Doctor, doctor_id)

    def find_patient_by_id(self, patient_id: int) -> Patient | None:
        return self.db.get(Patient, patient_id)

    def find_clinic_location_by_id(self, clinic_location_id: int) -> ClinicLocation | None:
        return self.db.get(ClinicLocation, clinic_location_id)

    def search_doctors(
        self,
        name: str | None = None,
        specialty: str | None = None,
        active_only: bool = False,
    ) -> list[Doctor]:
        query = self.db.query(Doctor)
        if name:
            query = query.filter(name_matches(Doctor.first_name, Doctor.last_name, name))
        if specialty:
            query = query.filter(func.lower(Doctor.specialty) == specialty.strip().lower())
        if active_only:
            # NULL is treated as active, matching Doctor.is_active.
            query = query.filter(Doctor.active.isnot(False))
        return query.order_by(Doctor.id.asc()).all()

    def doctor_email_taken(self, email: str) -> bool:
        return self.db.query(Doctor.id).filter(Doctor.email == email).first() is not None

    def doctor_phone_taken(self, phone: str) -> bool:
        return self.db.query(Doctor.id).filter(Doctor.phone == phone).first() is not None

    def patient_email_taken(self, email: str) -> bool:
        return self.db.query(Patient.id).filter(Patient.email == email).first() is not None

    def patient_phone_taken(self, phone: str) -> bool:
        return self.db.query(Patient.id).filter(Patient.phone == phone).first() is not None

    def save_doctor(self, doctor: Doctor) -> Doctor:
        self.db.add(doctor)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            message = str(exc.orig).lower()
            if 'email' in message:
                raise ValidationFailure('Email already in use') from exc
            if 'phone' in message:
                raise ValidationFailure('Phone already in use') from exc
            raise
        self.db.refresh(doctor)
        return doctor
