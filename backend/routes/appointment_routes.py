import logging
from contextlib import contextmanager
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_store, require_roles
from backend.auth.identity import Identity, Role
from backend.repositories.scheduling_store import SqlSchedulingStore
from backend.schemas.appointment import (
    AppointmentResponse,
    AppointmentStatusUpdateRequest,
    CreateAppointmentRequest,
    SlotCheckResponse,
    UpdateAppointmentRequest,
)
from backend.services.authorizer import MutationAuthorizer, authorize_booking, authorize_view
from backend.services.booking import BookingEngine
from backend.services.errors import InternalFailure
from backend.services.lifecycle import StatusLifecycleManager
from backend.services.queries import AppointmentQueries

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


@contextmanager
def storage_errors(db: Session):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Appointment storage operation failed')
        raise InternalFailure(DATABASE_UNAVAILABLE) from exc


@router.post('', response_model=AppointmentResponse, status_code=201)
def book_appointment(
    data: CreateAppointmentRequest,
    identity: Identity = Depends(require_roles(Role.PATIENT, Role.ADMIN)),
    store: SqlSchedulingStore = Depends(get_store),
):
    authorize_booking(identity, data.patient_id)
    with storage_errors(store.db):
        return BookingEngine(store).book(
            doctor_id=data.doctor_id,
            patient_id=data.patient_id,
            clinic_location_id=data.clinic_location_id,
            requested_time=data.appointment_time,
        )


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    identity: Identity = Depends(require_roles(Role.PATIENT)),
    store: SqlSchedulingStore = Depends(get_store),
):
    with storage_errors(store.db):
        return MutationAuthorizer(store).update(
            appointment_id,
            requesting_patient_id=identity.user_id,
            new_time=data.new_appointment_time,
            new_doctor_id=data.new_doctor_id,
            new_clinic_location_id=data.new_clinic_location_id,
        )


@router.delete('/{appointment_id}', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    identity: Identity = Depends(require_roles(Role.PATIENT)),
    store: SqlSchedulingStore = Depends(get_store),
):
    with storage_errors(store.db):
        return MutationAuthorizer(store).cancel(appointment_id, requesting_patient_id=identity.user_id)


@router.patch('/status', response_model=AppointmentResponse)
def change_appointment_status(
    data: AppointmentStatusUpdateRequest,
    identity: Identity = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    store: SqlSchedulingStore = Depends(get_store),
):
    acting_doctor_id = identity.user_id if identity.role is Role.DOCTOR else None
    with storage_errors(store.db):
        result = StatusLifecycleManager(store).change_status(
            data.appointment_id,
            data.status,
            acting_doctor_id=acting_doctor_id,
        )
    logger.info('Status of appointment %s set by %s %s', data.appointment_id, identity.role.value.lower(), identity.user_id)
    return result


@router.get('/doctor/{doctor_id}', response_model=list[AppointmentResponse])
def list_doctor_day(
    doctor_id: int,
    day: date = Query(..., alias='date'),
    patient_name: str | None = Query(default=None),
    identity: Identity = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    store: SqlSchedulingStore = Depends(get_store),
):
    authorize_view(identity, doctor_id=doctor_id)
    with storage_errors(store.db):
        return AppointmentQueries(store).doctor_day(doctor_id, day, patient_name)


@router.get('/patient/{patient_id}', response_model=list[AppointmentResponse])
def list_patient_appointments(
    patient_id: int,
    doctor_name: str | None = Query(default=None),
    condition: str | None = Query(default=None),
    status: int | None = Query(default=None),
    identity: Identity = Depends(require_roles(Role.ADMIN, Role.PATIENT)),
    store: SqlSchedulingStore = Depends(get_store),
):
    authorize_view(identity, patient_id=patient_id)
    with storage_errors(store.db):
        return AppointmentQueries(store).patient_appointments(
            patient_id,
            doctor_name=doctor_name,
            condition=condition,
            status=status,
        )


@router.get('/slot-check', response_model=SlotCheckResponse)
def check_slot(
    doctor_id: int = Query(...),
    appointment_time: datetime = Query(...),
    store: SqlSchedulingStore = Depends(get_store),
):
    with storage_errors(store.db):
        result = BookingEngine(store).check_slot(doctor_id, appointment_time)
    return SlotCheckResponse(
        doctor_id=doctor_id,
        appointment_time=appointment_time,
        result=result.name.lower(),
        code=result.value,
    )
