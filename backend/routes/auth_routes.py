import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import (
    authorization_header,
    get_current_identity,
    get_identity_resolver,
    get_jwt_settings,
    get_store,
)
from backend.auth.identity import Identity, IdentityResolver
from backend.core.config import JwtSettings
from backend.repositories.scheduling_store import SqlSchedulingStore
from backend.schemas.auth import AuthResponse, IdentityResponse, LoginRequest, TokenValidationResponse
from backend.services.errors import InternalFailure
from backend.services.login import LoginService

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


@router.post('/login', response_model=AuthResponse)
def login(
    data: LoginRequest,
    store: SqlSchedulingStore = Depends(get_store),
    settings: JwtSettings = Depends(get_jwt_settings),
):
    try:
        result = LoginService(store, settings).login(data.role, data.identifier, data.password)
    except SQLAlchemyError as exc:
        logger.exception('Login lookup failed')
        raise InternalFailure('Database unavailable. Verify DATABASE_URL and database credentials.') from exc

    return AuthResponse(
        access_token=result.token,
        user_id=result.user_id,
        role=result.role.value,
        display_name=result.display_name,
    )


@router.get('/me', response_model=IdentityResponse)
def me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(subject=identity.subject, role=identity.role.value, user_id=identity.user_id)


@router.get('/validate', response_model=TokenValidationResponse)
def validate_token(
    role: str | None = Query(default=None),
    authorization: str | None = Depends(authorization_header),
    resolver: IdentityResolver = Depends(get_identity_resolver),
):
    resolution = resolver.resolve(authorization, expected_role=role)
    if not resolution.is_valid:
        return TokenValidationResponse(valid=False, state=resolution.state.value, message=resolution.reason)

    identity = resolution.identity
    return TokenValidationResponse(
        valid=True,
        state=resolution.state.value,
        role=identity.role.value,
        user_id=identity.user_id,
        subject=identity.subject,
    )
