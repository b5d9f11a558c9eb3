from datetime import date, datetime

from pydantic import BaseModel

from backend.models.patient import Patient


class PatientResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date
    gender: str
    phone: str
    email: str | None = None
    address: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ContactUniquenessResponse(BaseModel):
    email: str | None = None
    phone: str | None = None
    unique: bool


def to_patient_response(patient: Patient) -> PatientResponse:
    return PatientResponse(
        id=patient.id,
        first_name=patient.first_name,
        last_name=patient.last_name,
        full_name=patient.full_name,
        date_of_birth=patient.date_of_birth,
        gender=patient.gender.value,
        phone=patient.phone,
        email=patient.email,
        address=patient.address,
        created_at=patient.created_at,
    )
