from datetime import date, datetime, time

from pydantic import BaseModel, field_validator

from backend.models.appointment import Appointment, AppointmentStatus, status_label


class CreateAppointmentRequest(BaseModel):
    doctor_id: int
    patient_id: int
    clinic_location_id: int
    appointment_time: datetime


class UpdateAppointmentRequest(BaseModel):
    new_appointment_time: datetime | None = None
    new_doctor_id: int | None = None
    new_clinic_location_id: int | None = None


class AppointmentStatusUpdateRequest(BaseModel):
    appointment_id: int
    status: int

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: int) -> int:
        if value not in {member.value for member in AppointmentStatus}:
            raise ValueError('Status must be 0 (Scheduled), 1 (Completed) or 2 (Cancelled).')
        return value


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    doctor_full_name: str | None = None
    patient_id: int
    patient_full_name: str | None = None
    clinic_location_id: int
    clinic_location_name: str | None = None
    appointment_time: datetime
    appointment_date: date
    appointment_time_only: time
    end_time: datetime
    status: int
    status_label: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class SlotCheckResponse(BaseModel):
    doctor_id: int
    appointment_time: datetime
    result: str
    code: int


def to_response(appointment: Appointment) -> AppointmentResponse:
    doctor = appointment.doctor
    patient = appointment.patient
    location = appointment.clinic_location
    return AppointmentResponse(
        id=appointment.id,
        doctor_id=appointment.doctor_id,
        doctor_full_name=doctor.full_name if doctor else None,
        patient_id=appointment.patient_id,
        patient_full_name=patient.full_name if patient else None,
        clinic_location_id=appointment.clinic_location_id,
        clinic_location_name=location.name if location else None,
        appointment_time=appointment.appointment_time,
        appointment_date=appointment.appointment_date,
        appointment_time_only=appointment.appointment_time_only,
        end_time=appointment.end_time,
        status=appointment.status,
        status_label=status_label(appointment.status),
        created_at=appointment.created_at,
    )
