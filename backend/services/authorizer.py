"""Patient-facing mutations: who may reschedule or cancel an appointment, and when."""

import logging
from datetime import datetime

from backend.auth.identity import Identity, Role
from backend.models.appointment import Appointment, AppointmentStatus
from backend.repositories.scheduling_store import SchedulingStore
from backend.schemas.appointment import AppointmentResponse, to_response
from backend.services.booking import Clock, require_active_doctor, require_future
from backend.services.errors import AuthorizationFailure, NotFound, StateConflict
from backend.services.lifecycle import ensure_transition

logger = logging.getLogger(__name__)


def authorize_booking(identity: Identity, patient_id: int) -> None:
    """Patients book only for themselves; admins may book for anyone."""
    if identity.role is Role.ADMIN:
        return
    if identity.role is Role.PATIENT and identity.user_id == patient_id:
        return
    if identity.role is Role.PATIENT:
        raise AuthorizationFailure('Patients can only book appointments for themselves.')
    raise AuthorizationFailure('Only patients and admins can book appointments.')


class MutationAuthorizer:
    def __init__(self, store: SchedulingStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def _owned_scheduled_appointment(self, appointment_id: int, requesting_patient_id: int, action: str) -> Appointment:
        appointment = self.store.find_appointment_by_id(appointment_id)
        if appointment is None:
            raise NotFound('Appointment', appointment_id)
        if appointment.patient_id != requesting_patient_id:
            raise AuthorizationFailure(f"You cannot {action} another patient's appointment.")
        if not appointment.is_scheduled:
            raise StateConflict('Only scheduled appointments may be modified.')
        return appointment

    def update(
        self,
        appointment_id: int,
        requesting_patient_id: int,
        new_time: datetime | None = None,
        new_doctor_id: int | None = None,
        new_clinic_location_id: int | None = None,
    ) -> AppointmentResponse:
        appointment = self._owned_scheduled_appointment(appointment_id, requesting_patient_id, 'modify')

        # No attribute is assigned until every check below has passed.
        target_doctor_id = new_doctor_id if new_doctor_id is not None else appointment.doctor_id
        target_time = appointment.appointment_time
        if new_time is not None:
            target_time = require_future(new_time, self.clock(), 'New appointment time must be in the future.')
            if self.store.doctor_has_appointment_at(target_doctor_id, target_time, exclude_appointment_id=appointment.id):
                raise StateConflict('Requested new time conflicts with an existing appointment.')

        new_doctor = None
        if new_doctor_id is not None and new_doctor_id != appointment.doctor_id:
            new_doctor = require_active_doctor(self.store, new_doctor_id, label='New doctor')
            if new_time is None and self.store.doctor_has_appointment_at(
                new_doctor.id, target_time, exclude_appointment_id=appointment.id
            ):
                raise StateConflict('New doctor already has an appointment at this time.')

        new_location = None
        if new_clinic_location_id is not None and new_clinic_location_id != appointment.clinic_location_id:
            new_location = self.store.find_clinic_location_by_id(new_clinic_location_id)
            if new_location is None:
                raise NotFound('New clinic location', new_clinic_location_id)

        appointment.appointment_time = target_time
        if new_doctor is not None:
            appointment.doctor = new_doctor
        if new_location is not None:
            appointment.clinic_location = new_location

        saved = self.store.save(appointment)
        logger.info(
            'Patient %s updated appointment %s (doctor %s at %s, location %s)',
            requesting_patient_id,
            saved.id,
            saved.doctor_id,
            saved.appointment_time.isoformat(),
            saved.clinic_location_id,
        )
        return to_response(saved)

    def cancel(self, appointment_id: int, requesting_patient_id: int) -> AppointmentResponse:
        appointment = self._owned_scheduled_appointment(appointment_id, requesting_patient_id, 'cancel')
        ensure_transition(appointment.status, AppointmentStatus.CANCELLED)

        appointment.status = AppointmentStatus.CANCELLED.value
        saved = self.store.save(appointment)
        logger.info('Patient %s cancelled appointment %s', requesting_patient_id, saved.id)
        return to_response(saved)


def authorize_view(identity: Identity, *, doctor_id: int | None = None, patient_id: int | None = None) -> None:
    """Doctors see their own schedule, patients their own appointments, admins everything."""
    if identity.role is Role.ADMIN:
        return
    if doctor_id is not None and identity.role is Role.DOCTOR and identity.user_id == doctor_id:
        return
    if patient_id is not None and identity.role is Role.PATIENT and identity.user_id == patient_id:
        return
    raise AuthorizationFailure('You are not allowed to view these appointments.')
