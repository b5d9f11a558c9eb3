from fastapi import APIRouter, Depends, Query

from backend.auth.dependencies import get_current_identity, get_directory, get_store, require_roles
from backend.auth.identity import Identity, Role
from backend.repositories.directory_store import SqlDirectoryStore
from backend.repositories.scheduling_store import SqlSchedulingStore
from backend.routes.appointment_routes import storage_errors
from backend.schemas.appointment import AppointmentResponse
from backend.schemas.patient import ContactUniquenessResponse, PatientResponse
from backend.services.patients import PatientService
from backend.services.queries import AppointmentQueries

router = APIRouter(tags=['patients'])


@router.get('/me', response_model=PatientResponse)
def my_profile(
    identity: Identity = Depends(require_roles(Role.PATIENT)),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return PatientService(directory).profile(identity.user_id)


@router.get('/me/appointments', response_model=list[AppointmentResponse])
def my_appointments(
    doctor_name: str | None = Query(default=None),
    condition: str | None = Query(default=None),
    status: int | None = Query(default=None),
    identity: Identity = Depends(require_roles(Role.PATIENT)),
    store: SqlSchedulingStore = Depends(get_store),
):
    with storage_errors(store.db):
        return AppointmentQueries(store).patient_appointments(
            identity.user_id,
            doctor_name=doctor_name,
            condition=condition,
            status=status,
        )


@router.get('/contact-unique', response_model=ContactUniquenessResponse)
def check_contact_unique(
    email: str | None = Query(default=None),
    phone: str | None = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        unique = PatientService(directory).contact_is_unique(email=email, phone=phone)
    return ContactUniquenessResponse(email=email, phone=phone, unique=unique)
