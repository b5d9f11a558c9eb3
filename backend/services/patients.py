"""Patient self-service lookups."""

from backend.repositories.directory_store import SqlDirectoryStore
from backend.schemas.patient import PatientResponse, to_patient_response
from backend.services.errors import NotFound
from backend.services.queries import blank_to_none


class PatientService:
    def __init__(self, directory: SqlDirectoryStore):
        self.directory = directory

    def profile(self, patient_id: int) -> PatientResponse:
        patient = self.directory.find_patient_by_id(patient_id)
        if patient is None:
            raise NotFound('Patient', patient_id)
        return to_patient_response(patient)

    def contact_is_unique(self, email: str | None = None, phone: str | None = None) -> bool:
        """False when another patient already uses the email or phone; blank values are ignored."""
        email = blank_to_none(email)
        phone = blank_to_none(phone)
        if phone is not None and self.directory.patient_phone_taken(phone):
            return False
        if email is not None and self.directory.patient_email_taken(email):
            return False
        return True
