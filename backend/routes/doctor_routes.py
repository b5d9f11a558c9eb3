from fastapi import APIRouter, Depends, Query

from backend.auth.dependencies import get_current_identity, get_directory, require_roles
from backend.auth.identity import Identity, Role
from backend.repositories.directory_store import SqlDirectoryStore
from backend.routes.appointment_routes import storage_errors
from backend.schemas.doctor import CreateDoctorRequest, DoctorResponse
from backend.services.doctors import DoctorService

router = APIRouter(tags=['doctors'])


@router.get('', response_model=list[DoctorResponse])
def search_doctors(
    name: str | None = Query(default=None),
    specialty: str | None = Query(default=None),
    active_only: bool = Query(default=False),
    identity: Identity = Depends(get_current_identity),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return DoctorService(directory).search(name=name, specialty=specialty, active_only=active_only)


@router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(
    doctor_id: int,
    identity: Identity = Depends(get_current_identity),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return DoctorService(directory).get(doctor_id)


@router.post('', response_model=DoctorResponse, status_code=201)
def create_doctor(
    data: CreateDoctorRequest,
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return DoctorService(directory).create(data)


@router.patch('/{doctor_id}/active', response_model=DoctorResponse)
def set_doctor_active(
    doctor_id: int,
    active: bool = Query(...),
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return DoctorService(directory).set_active(doctor_id, active)


@router.patch('/{doctor_id}/clinic/{clinic_location_id}', response_model=DoctorResponse)
def assign_doctor_clinic(
    doctor_id: int,
    clinic_location_id: int,
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    directory: SqlDirectoryStore = Depends(get_directory),
):
    with storage_errors(directory.db):
        return DoctorService(directory).assign_clinic(doctor_id, clinic_location_id)
