from datetime import datetime, timedelta, timezone

import pytest

from backend.auth.identity import Identity, Role
from backend.models.appointment import Appointment, AppointmentStatus
from backend.services.authorizer import MutationAuthorizer, authorize_booking, authorize_view
from backend.services.errors import AuthorizationFailure, NotFound, StateConflict, ValidationFailure
from conftest import FIXED_NOW

SLOT = FIXED_NOW + timedelta(days=2)
EXPIRES = datetime(2030, 2, 1, tzinfo=timezone.utc)


def _identity(role: Role, user_id: int) -> Identity:
    return Identity(subject=f'{role.value.lower()}{user_id}@example.test', role=role, user_id=user_id, expires_at=EXPIRES)


@pytest.fixture
def booked(clinic, make_appointment) -> Appointment:
    return make_appointment(1, 7, 3, SLOT)


def test_update_moves_appointment_to_free_time(store, clock, booked) -> None:
    result = MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_time=SLOT + timedelta(hours=1))

    assert result.appointment_time == SLOT + timedelta(hours=1)
    assert result.status == AppointmentStatus.SCHEDULED


def test_update_to_own_current_time_is_not_a_conflict(store, clock, booked) -> None:
    result = MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_time=SLOT)

    assert result.appointment_time == SLOT


def test_update_rejects_time_taken_by_another_appointment(store, clock, booked, make_patient, make_appointment) -> None:
    make_patient(8, first_name='Bob', last_name='Jones')
    make_appointment(1, 8, 3, SLOT + timedelta(hours=1))

    with pytest.raises(StateConflict):
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_time=SLOT + timedelta(hours=1))


def test_update_checks_conflict_against_new_doctor(store, clock, booked, make_doctor, make_patient, make_appointment) -> None:
    make_doctor(2, first_name='Lisa', last_name='Cuddy')
    make_patient(8, first_name='Bob', last_name='Jones')
    make_appointment(2, 8, 3, SLOT + timedelta(hours=2))

    with pytest.raises(StateConflict):
        MutationAuthorizer(store, clock=clock).update(
            booked.id,
            7,
            new_time=SLOT + timedelta(hours=2),
            new_doctor_id=2,
        )


def test_update_rejects_new_doctor_busy_at_current_time(store, clock, booked, make_doctor, make_patient, make_appointment) -> None:
    make_doctor(2, first_name='Lisa', last_name='Cuddy')
    make_patient(8, first_name='Bob', last_name='Jones')
    make_appointment(2, 8, 3, SLOT)

    with pytest.raises(StateConflict):
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_doctor_id=2)


def test_update_translates_unique_constraint_race_into_conflict(
    store, clock, booked, db, make_patient, make_appointment, monkeypatch
) -> None:
    make_patient(8, first_name='Bob', last_name='Jones')
    make_appointment(1, 8, 3, SLOT + timedelta(hours=1))

    # The competing appointment landed after the pre-check ran.
    monkeypatch.setattr(store, 'doctor_has_appointment_at', lambda *args, **kwargs: False)

    with pytest.raises(StateConflict) as exception_info:
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_time=SLOT + timedelta(hours=1))

    assert exception_info.value.message == 'Time slot already booked for doctor.'
    db.expire_all()
    assert db.get(Appointment, booked.id).appointment_time == SLOT


def test_update_rejects_past_time(store, clock, booked) -> None:
    with pytest.raises(ValidationFailure):
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_time=FIXED_NOW - timedelta(hours=1))


def test_update_reassigns_doctor_and_location(store, clock, booked, make_doctor, make_location) -> None:
    make_doctor(2, first_name='Lisa', last_name='Cuddy')
    make_location(4, name='Uptown Clinic')

    result = MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_doctor_id=2, new_clinic_location_id=4)

    assert result.doctor_id == 2
    assert result.doctor_full_name == 'Lisa Cuddy'
    assert result.clinic_location_id == 4
    assert result.clinic_location_name == 'Uptown Clinic'


def test_update_rejects_unknown_new_doctor(store, clock, booked) -> None:
    with pytest.raises(NotFound) as exception_info:
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_doctor_id=99)

    assert exception_info.value.resource == 'New doctor'


def test_update_rejects_inactive_new_doctor(store, clock, booked, make_doctor) -> None:
    make_doctor(2, first_name='Lisa', last_name='Cuddy', active=False)

    with pytest.raises(StateConflict):
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_doctor_id=2)


def test_update_rejects_unknown_new_location(store, clock, booked) -> None:
    with pytest.raises(NotFound) as exception_info:
        MutationAuthorizer(store, clock=clock).update(booked.id, 7, new_clinic_location_id=99)

    assert exception_info.value.resource == 'New clinic location'


def test_rejected_update_leaves_appointment_untouched(store, clock, booked, db) -> None:
    with pytest.raises(NotFound):
        MutationAuthorizer(store, clock=clock).update(
            booked.id,
            7,
            new_time=SLOT + timedelta(hours=3),
            new_clinic_location_id=99,
        )

    db.expire_all()
    assert db.get(Appointment, booked.id).appointment_time == SLOT


def test_update_rejects_missing_appointment(store, clock, clinic) -> None:
    with pytest.raises(NotFound):
        MutationAuthorizer(store, clock=clock).update(123, 7, new_time=SLOT)


def test_update_rejects_other_patient(store, clock, booked) -> None:
    with pytest.raises(AuthorizationFailure):
        MutationAuthorizer(store, clock=clock).update(booked.id, 8, new_time=SLOT + timedelta(hours=1))


@pytest.mark.parametrize('status', [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED])
def test_update_and_cancel_reject_terminal_appointments(store, clock, clinic, make_appointment, status) -> None:
    appointment = make_appointment(1, 7, 3, SLOT, status=status.value)
    authorizer = MutationAuthorizer(store, clock=clock)

    with pytest.raises(StateConflict) as exception_info:
        authorizer.update(appointment.id, 7, new_time=SLOT + timedelta(hours=1))
    assert exception_info.value.message == 'Only scheduled appointments may be modified.'

    with pytest.raises(StateConflict):
        authorizer.cancel(appointment.id, 7)


def test_cancel_soft_cancels_owned_appointment(store, clock, booked, db) -> None:
    result = MutationAuthorizer(store, clock=clock).cancel(booked.id, 7)

    assert result.status == AppointmentStatus.CANCELLED
    assert result.status_label == 'Cancelled'
    assert db.get(Appointment, booked.id) is not None


def test_cancel_rejects_non_owner_even_when_scheduled(store, clock, booked) -> None:
    with pytest.raises(AuthorizationFailure):
        MutationAuthorizer(store, clock=clock).cancel(booked.id, 8)


def test_cancel_rejects_missing_appointment(store, clock, clinic) -> None:
    with pytest.raises(NotFound):
        MutationAuthorizer(store, clock=clock).cancel(404, 7)


def test_authorize_booking_rules() -> None:
    authorize_booking(_identity(Role.PATIENT, 7), 7)
    authorize_booking(_identity(Role.ADMIN, 1), 7)

    with pytest.raises(AuthorizationFailure):
        authorize_booking(_identity(Role.PATIENT, 8), 7)
    with pytest.raises(AuthorizationFailure):
        authorize_booking(_identity(Role.DOCTOR, 1), 7)


def test_authorize_view_rules() -> None:
    authorize_view(_identity(Role.ADMIN, 1), doctor_id=5)
    authorize_view(_identity(Role.DOCTOR, 5), doctor_id=5)
    authorize_view(_identity(Role.PATIENT, 7), patient_id=7)

    with pytest.raises(AuthorizationFailure):
        authorize_view(_identity(Role.DOCTOR, 6), doctor_id=5)
    with pytest.raises(AuthorizationFailure):
        authorize_view(_identity(Role.PATIENT, 8), patient_id=7)
    with pytest.raises(AuthorizationFailure):
        authorize_view(_identity(Role.PATIENT, 5), doctor_id=5)
