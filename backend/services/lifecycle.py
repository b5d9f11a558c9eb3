"""Appointment status state machine.

    SCHEDULED --> COMPLETED
    SCHEDULED --> CANCELLED

COMPLETED and CANCELLED are terminal and there are no self-transitions.
"""

import logging

from backend.models.appointment import AppointmentStatus, status_label
from backend.repositories.scheduling_store import SchedulingStore
from backend.schemas.appointment import AppointmentResponse, to_response
from backend.services.errors import AuthorizationFailure, NotFound, StateConflict, ValidationFailure

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def parse_status(value: int | AppointmentStatus) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError as exc:
        raise ValidationFailure(f'Unknown appointment status: {value}.') from exc


def can_transition(current: int | None, target: int | AppointmentStatus) -> bool:
    try:
        current_status = AppointmentStatus(current)
        target_status = AppointmentStatus(target)
    except ValueError:
        return False
    return target_status in ALLOWED_TRANSITIONS[current_status]


def ensure_transition(current: int | None, target: int | AppointmentStatus) -> None:
    if not can_transition(current, target):
        raise StateConflict(
            f'Cannot change appointment status from {status_label(current)} to {status_label(target)}.'
        )


class StatusLifecycleManager:
    """Privileged status changes (doctor or admin flows)."""

    def __init__(self, store: SchedulingStore):
        self.store = store

    def change_status(
        self,
        appointment_id: int,
        status: int | AppointmentStatus,
        acting_doctor_id: int | None = None,
    ) -> AppointmentResponse:
        """Apply a status transition.

        When ``acting_doctor_id`` is given the appointment must belong to that doctor.
        """
        target = parse_status(status)
        appointment = self.store.find_appointment_by_id(appointment_id)
        if appointment is None:
            raise NotFound('Appointment', appointment_id)
        if acting_doctor_id is not None and appointment.doctor_id != acting_doctor_id:
            raise AuthorizationFailure("You cannot change the status of another doctor's appointment.")

        previous = appointment.status
        ensure_transition(previous, target)

        appointment.status = target.value
        saved = self.store.save(appointment)
        logger.info(
            'Appointment %s status changed from %s to %s',
            saved.id,
            status_label(previous),
            target.label,
        )
        return to_response(saved)

    def complete(self, appointment_id: int, acting_doctor_id: int | None = None) -> AppointmentResponse:
        return self.change_status(appointment_id, AppointmentStatus.COMPLETED, acting_doctor_id=acting_doctor_id)
