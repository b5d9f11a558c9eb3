import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, engine, ensure_appointment_schema
from backend.models import admin, appointment, clinic_location, doctor, patient  # noqa: F401
from backend.routes import appointment_routes, auth_routes, doctor_routes, patient_routes
from backend.services.errors import FailureKind, SchedulingError

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)

logger = logging.getLogger(__name__)

FAILURE_STATUS_CODES = {
    FailureKind.VALIDATION: 400,
    FailureKind.UNAUTHENTICATED: 401,
    FailureKind.AUTHORIZATION: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.STATE_CONFLICT: 409,
    FailureKind.INTERNAL: 503,
}

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(SchedulingError)
def handle_scheduling_error(request: Request, exc: SchedulingError) -> JSONResponse:
    status_code = FAILURE_STATUS_CODES[exc.kind]
    headers = {'WWW-Authenticate': 'Bearer'} if exc.kind is FailureKind.UNAUTHENTICATED else None
    return JSONResponse(
        status_code=status_code,
        content={'detail': exc.message, 'kind': exc.kind.value},
        headers=headers,
    )


@app.exception_handler(SQLAlchemyError)
def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Unhandled database error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=FAILURE_STATUS_CODES[FailureKind.INTERNAL],
        content={'detail': 'Database unavailable.', 'kind': FailureKind.INTERNAL.value},
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Clinic Scheduling API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(doctor_routes.router, prefix='/doctors')
app.include_router(patient_routes.router, prefix='/patients')
