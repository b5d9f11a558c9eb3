from datetime import date, datetime, timedelta

import pytest

from backend.models.appointment import AppointmentStatus
from backend.services.queries import AppointmentQueries, TemporalCondition
from conftest import FIXED_NOW

DAY = date(2030, 1, 12)


@pytest.fixture
def doctor_schedule(clinic, make_patient, make_appointment):
    make_patient(8, first_name='Bob', last_name='Jones')
    make_patient(9, first_name='Carla', last_name='Bobbins')
    return [
        make_appointment(1, 8, 3, datetime(2030, 1, 12, 15, 0)),
        make_appointment(1, 7, 3, datetime(2030, 1, 12, 0, 0)),
        make_appointment(1, 9, 3, datetime(2030, 1, 12, 9, 30)),
        make_appointment(1, 7, 3, datetime(2030, 1, 13, 0, 0)),
        make_appointment(1, 7, 3, datetime(2030, 1, 11, 23, 59)),
    ]


def test_doctor_day_returns_window_in_ascending_order(store, clock, doctor_schedule) -> None:
    results = AppointmentQueries(store, clock=clock).doctor_day(1, DAY)

    assert [result.appointment_time for result in results] == [
        datetime(2030, 1, 12, 0, 0),
        datetime(2030, 1, 12, 9, 30),
        datetime(2030, 1, 12, 15, 0),
    ]


def test_doctor_day_filters_by_patient_first_or_last_name(store, clock, doctor_schedule) -> None:
    results = AppointmentQueries(store, clock=clock).doctor_day(1, DAY, patient_name='BOB')

    assert [result.patient_full_name for result in results] == ['Carla Bobbins', 'Bob Jones']


def test_doctor_day_ignores_blank_patient_name(store, clock, doctor_schedule) -> None:
    results = AppointmentQueries(store, clock=clock).doctor_day(1, DAY, patient_name='   ')

    assert len(results) == 3


def test_doctor_day_excludes_other_doctors(store, clock, doctor_schedule, make_doctor, make_appointment) -> None:
    make_doctor(2, first_name='Lisa', last_name='Cuddy')
    make_appointment(2, 7, 3, datetime(2030, 1, 12, 11, 0))

    results = AppointmentQueries(store, clock=clock).doctor_day(2, DAY)

    assert [result.doctor_id for result in results] == [2]


@pytest.fixture
def patient_history(clinic, make_doctor, make_appointment):
    make_doctor(2, first_name='Lisa', last_name='Cuddy')
    return [
        make_appointment(1, 7, 3, FIXED_NOW + timedelta(days=3)),
        make_appointment(2, 7, 3, FIXED_NOW - timedelta(days=3), status=AppointmentStatus.COMPLETED.value),
        make_appointment(1, 7, 3, FIXED_NOW),
        make_appointment(2, 7, 3, FIXED_NOW + timedelta(days=1)),
        make_appointment(1, 7, 3, FIXED_NOW - timedelta(days=10), status=AppointmentStatus.CANCELLED.value),
    ]


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('past', TemporalCondition.PAST),
        ('PAST', TemporalCondition.PAST),
        ('future', TemporalCondition.FUTURE),
        ('Upcoming', TemporalCondition.FUTURE),
        ('all', TemporalCondition.ALL),
        ('', TemporalCondition.ALL),
        (None, TemporalCondition.ALL),
        ('yesterday', TemporalCondition.ALL),
    ],
)
def test_temporal_condition_parse(value, expected) -> None:
    assert TemporalCondition.parse(value) is expected


def test_future_and_past_partition_the_patient_history(store, clock, patient_history) -> None:
    queries = AppointmentQueries(store, clock=clock)

    everything = {result.id for result in queries.patient_appointments(7)}
    future = {result.id for result in queries.patient_appointments(7, condition='future')}
    past = {result.id for result in queries.patient_appointments(7, condition='past')}

    assert future == {patient_history[0].id, patient_history[3].id}
    assert future.isdisjoint(past)
    assert future | past == everything
    # An appointment exactly at "now" is not in the future.
    assert patient_history[2].id in past


def test_unrecognised_condition_passes_everything_through(store, clock, patient_history) -> None:
    queries = AppointmentQueries(store, clock=clock)

    results = queries.patient_appointments(7, condition='someday')

    assert [result.id for result in results] == [appointment.id for appointment in patient_history]


def test_doctor_name_filter_orders_descending(store, clock, patient_history) -> None:
    results = AppointmentQueries(store, clock=clock).patient_appointments(7, doctor_name='cud')

    assert [result.appointment_time for result in results] == [
        FIXED_NOW + timedelta(days=1),
        FIXED_NOW - timedelta(days=3),
    ]


def test_doctor_name_and_status_filters_combine(store, clock, patient_history) -> None:
    results = AppointmentQueries(store, clock=clock).patient_appointments(
        7,
        doctor_name='House',
        status=AppointmentStatus.SCHEDULED.value,
        condition='future',
    )

    assert [result.id for result in results] == [patient_history[0].id]


def test_status_filter_orders_ascending(store, clock, patient_history) -> None:
    results = AppointmentQueries(store, clock=clock).patient_appointments(7, status=AppointmentStatus.SCHEDULED.value)

    assert [result.appointment_time for result in results] == [
        FIXED_NOW,
        FIXED_NOW + timedelta(days=1),
        FIXED_NOW + timedelta(days=3),
    ]


def test_patient_appointments_only_returns_that_patient(store, clock, patient_history, make_patient, make_appointment) -> None:
    make_patient(8, first_name='Bob', last_name='Jones')
    make_appointment(1, 8, 3, FIXED_NOW + timedelta(days=5))

    results = AppointmentQueries(store, clock=clock).patient_appointments(7)

    assert {result.patient_id for result in results} == {7}
