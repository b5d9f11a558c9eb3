"""Read-only appointment queries for doctor and patient views."""

import enum
from datetime import date, datetime, time, timedelta

from backend.models.appointment import Appointment
from backend.repositories.scheduling_store import SchedulingStore
from backend.schemas.appointment import AppointmentResponse, to_response
from backend.services.booking import Clock


class TemporalCondition(str, enum.Enum):
    PAST = "past"
    FUTURE = "future"
    ALL = "all"

    @classmethod
    def parse(cls, value: str | None) -> "TemporalCondition":
        """``upcoming`` is an alias of ``future``; anything unrecognised means ``all``."""
        normalized = (value or '').strip().lower()
        if normalized in {'future', 'upcoming'}:
            return cls.FUTURE
        if normalized == 'past':
            return cls.PAST
        return cls.ALL


def matches_condition(appointment: Appointment, condition: TemporalCondition, now: datetime) -> bool:
    if condition is TemporalCondition.ALL:
        return True
    is_future = appointment.appointment_time > now
    return is_future if condition is TemporalCondition.FUTURE else not is_future


def blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


class AppointmentQueries:
    def __init__(self, store: SchedulingStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def doctor_day(
        self,
        doctor_id: int,
        day: date,
        patient_name: str | None = None,
    ) -> list[AppointmentResponse]:
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)
        appointments = self.store.find_appointments_for_doctor_between(
            doctor_id,
            day_start,
            day_end,
            patient_name=blank_to_none(patient_name),
        )
        return [to_response(appointment) for appointment in appointments]

    def patient_appointments(
        self,
        patient_id: int,
        doctor_name: str | None = None,
        condition: str | None = None,
        status: int | None = None,
    ) -> list[AppointmentResponse]:
        base = self.store.find_appointments_for_patient(
            patient_id,
            doctor_name=blank_to_none(doctor_name),
            status=status,
        )
        temporal_condition = TemporalCondition.parse(condition)
        now = self.clock()
        return [
            to_response(appointment)
            for appointment in base
            if matches_condition(appointment, temporal_condition, now)
        ]
