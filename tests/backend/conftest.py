import os
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.core.config import JwtSettings  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.admin import Admin, StaffRole  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.clinic_location import ClinicLocation  # noqa: E402
from backend.models.doctor import Doctor  # noqa: E402
from backend.models.patient import Gender, Patient  # noqa: E402
from backend.repositories.scheduling_store import SqlSchedulingStore  # noqa: E402

FIXED_NOW = datetime(2030, 1, 10, 9, 0)


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db) -> SqlSchedulingStore:
    return SqlSchedulingStore(db)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def jwt_settings() -> JwtSettings:
    return JwtSettings(secret_key='test-secret-key-that-is-long-enough-for-hs256', expires_minutes=30)


@pytest.fixture
def make_doctor(db):
    def _make_doctor(doctor_id: int, first_name: str = 'Gregory', last_name: str = 'House', active: bool = True) -> Doctor:
        doctor = Doctor(
            id=doctor_id,
            first_name=first_name,
            last_name=last_name,
            specialty='Diagnostics',
            phone=f'555-01{doctor_id:02d}',
            email=f'doctor{doctor_id}@clinic.test',
            active=active,
        )
        db.add(doctor)
        db.commit()
        return doctor

    return _make_doctor


@pytest.fixture
def make_patient(db):
    def _make_patient(
        patient_id: int,
        first_name: str = 'Alice',
        last_name: str = 'Smith',
        password: str = 'patient-pass',
    ) -> Patient:
        patient = Patient(
            id=patient_id,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date(1990, 5, 17),
            gender=Gender.FEMALE,
            phone=f'555-02{patient_id:02d}',
            email=f'patient{patient_id}@example.test',
        )
        patient.set_password(password)
        db.add(patient)
        db.commit()
        return patient

    return _make_patient


@pytest.fixture
def make_location(db):
    def _make_location(location_id: int, name: str = 'Downtown Clinic') -> ClinicLocation:
        location = ClinicLocation(id=location_id, name=name, address=f'{location_id} Main Street')
        db.add(location)
        db.commit()
        return location

    return _make_location


@pytest.fixture
def make_admin(db):
    def _make_admin(admin_id: int, username: str = 'frontdesk', password: str = 'admin-pass') -> Admin:
        admin = Admin(id=admin_id, username=username, email=f'{username}@clinic.test', role=StaffRole.ADMIN)
        admin.set_password(password)
        db.add(admin)
        db.commit()
        return admin

    return _make_admin


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        doctor_id: int,
        patient_id: int,
        clinic_location_id: int,
        appointment_time: datetime,
        status: int = 0,
    ) -> Appointment:
        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            clinic_location_id=clinic_location_id,
            appointment_time=appointment_time,
            status=status,
            created_at=FIXED_NOW,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture
def clinic(make_doctor, make_patient, make_location):
    """Doctor 1, patient 7 and clinic location 3."""
    return {
        'doctor': make_doctor(1),
        'patient': make_patient(7),
        'location': make_location(3),
    }
