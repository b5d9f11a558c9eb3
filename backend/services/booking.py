"""Booking engine: validates and persists new appointments."""

import enum
import logging
from datetime import datetime
from typing import Callable

from backend.models.appointment import Appointment, AppointmentStatus
from backend.models.doctor import Doctor
from backend.repositories.scheduling_store import SLOT_TAKEN_MESSAGE, SchedulingStore
from backend.schemas.appointment import AppointmentResponse, to_response
from backend.services.errors import NotFound, StateConflict, ValidationFailure

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class SlotCheck(enum.IntEnum):
    DOCTOR_NOT_FOUND = -1
    UNAVAILABLE = 0
    AVAILABLE = 1


def normalize_time(value: datetime) -> datetime:
    """Appointment times are stored as naive local timestamps."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def require_future(value: datetime | None, now: datetime, message: str) -> datetime:
    if value is None:
        raise ValidationFailure('Appointment time required.')
    value = normalize_time(value)
    if value <= now:
        raise ValidationFailure(message)
    return value


def require_active_doctor(store: SchedulingStore, doctor_id: int, label: str = 'Doctor') -> Doctor:
    doctor = store.find_doctor_by_id(doctor_id)
    if doctor is None:
        raise NotFound(label, doctor_id)
    if not doctor.is_active:
        raise StateConflict(f'{label} is not active.')
    return doctor


class BookingEngine:
    def __init__(self, store: SchedulingStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def book(
        self,
        doctor_id: int | None,
        patient_id: int | None,
        clinic_location_id: int | None,
        requested_time: datetime | None,
    ) -> AppointmentResponse:
        now = self.clock()
        appointment_time = require_future(requested_time, now, 'Appointment time must be in the future.')
        if doctor_id is None or patient_id is None or clinic_location_id is None:
            raise ValidationFailure('Doctor, patient, and clinic location are required.')

        doctor = self.store.find_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFound('Doctor', doctor_id)
        patient = self.store.find_patient_by_id(patient_id)
        if patient is None:
            raise NotFound('Patient', patient_id)
        location = self.store.find_clinic_location_by_id(clinic_location_id)
        if location is None:
            raise NotFound('Clinic location', clinic_location_id)

        if not doctor.is_active:
            raise StateConflict('Doctor is not active.')

        if self.store.doctor_has_appointment_at(doctor.id, appointment_time):
            raise StateConflict(SLOT_TAKEN_MESSAGE)

        appointment = Appointment(
            doctor=doctor,
            patient=patient,
            clinic_location=location,
            appointment_time=appointment_time,
            status=AppointmentStatus.SCHEDULED.value,
            created_at=now,
        )
        saved = self.store.save(appointment)
        logger.info(
            'Booked appointment %s for patient %s with doctor %s at %s',
            saved.id,
            patient.id,
            doctor.id,
            appointment_time.isoformat(),
        )
        return to_response(saved)

    def check_slot(self, doctor_id: int | None, requested_time: datetime | None) -> SlotCheck:
        """Pre-booking availability check; never raises for bad input."""
        if doctor_id is None or requested_time is None:
            return SlotCheck.UNAVAILABLE
        if self.store.find_doctor_by_id(doctor_id) is None:
            return SlotCheck.DOCTOR_NOT_FOUND

        requested_time = normalize_time(requested_time)
        if requested_time <= self.clock():
            return SlotCheck.UNAVAILABLE
        if self.store.doctor_has_appointment_at(doctor_id, requested_time):
            return SlotCheck.UNAVAILABLE
        return SlotCheck.AVAILABLE
