"""Doctor directory: search, onboarding, activation and clinic assignment."""

import logging

from backend.models.doctor import Doctor
from backend.repositories.directory_store import SqlDirectoryStore
from backend.schemas.doctor import CreateDoctorRequest, DoctorResponse, to_doctor_response
from backend.services.errors import NotFound, ValidationFailure
from backend.services.queries import blank_to_none

logger = logging.getLogger(__name__)


class DoctorService:
    def __init__(self, directory: SqlDirectoryStore):
        self.directory = directory

    def _require_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.directory.find_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFound('Doctor', doctor_id)
        return doctor

    def get(self, doctor_id: int) -> DoctorResponse:
        return to_doctor_response(self._require_doctor(doctor_id))

    def search(
        self,
        name: str | None = None,
        specialty: str | None = None,
        active_only: bool = False,
    ) -> list[DoctorResponse]:
        """Partial name match on first or last name, exact specialty ignoring case.

        With no criteria every doctor is returned.
        """
        doctors = self.directory.search_doctors(
            name=blank_to_none(name),
            specialty=blank_to_none(specialty),
            active_only=active_only,
        )
        return [to_doctor_response(doctor) for doctor in doctors]

    def create(self, data: CreateDoctorRequest) -> DoctorResponse:
        if self.directory.doctor_email_taken(data.email):
            raise ValidationFailure('Email already in use')
        if self.directory.doctor_phone_taken(data.phone):
            raise ValidationFailure('Phone already in use')

        location = None
        if data.clinic_location_id is not None:
            location = self.directory.find_clinic_location_by_id(data.clinic_location_id)
            if location is None:
                raise NotFound('Clinic location', data.clinic_location_id)

        doctor = Doctor(
            first_name=data.first_name,
            last_name=data.last_name,
            specialty=data.specialty,
            phone=data.phone,
            email=data.email,
            clinic_location=location,
            active=True,
        )
        saved = self.directory.save_doctor(doctor)
        logger.info('Created doctor %s (%s)', saved.id, saved.full_name)
        return to_doctor_response(saved)

    def set_active(self, doctor_id: int, active: bool) -> DoctorResponse:
        doctor = self._require_doctor(doctor_id)
        doctor.active = active
        saved = self.directory.save_doctor(doctor)
        logger.info('Doctor %s marked %s', saved.id, 'active' if active else 'inactive')
        return to_doctor_response(saved)

    def assign_clinic(self, doctor_id: int, clinic_location_id: int) -> DoctorResponse:
        doctor = self._require_doctor(doctor_id)
        location = self.directory.find_clinic_location_by_id(clinic_location_id)
        if location is None:
            raise NotFound('Clinic location', clinic_location_id)

        doctor.clinic_location = location
        saved = self.directory.save_doctor(doctor)
        logger.info('Doctor %s assigned to clinic location %s', saved.id, location.id)
        return to_doctor_response(saved)
