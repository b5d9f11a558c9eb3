from pydantic import BaseModel, field_validator

from backend.models.doctor import Doctor


class CreateDoctorRequest(BaseModel):
    first_name: str
    last_name: str
    specialty: str
    phone: str
    email: str
    clinic_location_id: int | None = None

    @field_validator('first_name', 'last_name', 'specialty', 'phone', 'email')
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError('Value must not be blank.')
        return cleaned


class DoctorResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    specialty: str
    phone: str
    email: str
    clinic_location_id: int | None = None
    clinic_location_name: str | None = None
    active: bool

    class Config:
        from_attributes = True


def to_doctor_response(doctor: Doctor) -> DoctorResponse:
    location = doctor.clinic_location
    return DoctorResponse(
        id=doctor.id,
        first_name=doctor.first_name,
        last_name=doctor.last_name,
        full_name=doctor.full_name,
        specialty=doctor.specialty,
        phone=doctor.phone,
        email=doctor.email,
        clinic_location_id=doctor.clinic_location_id,
        clinic_location_name=location.name if location else None,
        active=doctor.is_active,
    )
