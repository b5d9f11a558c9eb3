from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from backend.auth.identity import Identity, IdentityResolver, Role
from backend.core.config import JwtSettings
from backend.database import get_db
from backend.repositories.directory_store import SqlDirectoryStore
from backend.repositories.scheduling_store import SqlSchedulingStore
from backend.services.errors import AuthorizationFailure

# The "Bearer " prefix is optional, so the raw header is read instead of HTTPBearer.
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_jwt_settings() -> JwtSettings:
    return JwtSettings.from_env()


def get_store(db: Session = Depends(get_db)) -> SqlSchedulingStore:
    return SqlSchedulingStore(db)


def get_directory(db: Session = Depends(get_db)) -> SqlDirectoryStore:
    return SqlDirectoryStore(db)


def get_identity_resolver(
    store: SqlSchedulingStore = Depends(get_store),
    settings: JwtSettings = Depends(get_jwt_settings),
) -> IdentityResolver:
    return IdentityResolver(settings, store)


def get_current_identity(
    authorization: str | None = Depends(authorization_header),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    return resolver.require(authorization)


def require_roles(*roles: Role):
    allowed = ", ".join(role.value.lower() for role in roles)

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not identity.has_role(*roles):
            raise AuthorizationFailure(f"This action requires one of the roles: {allowed}.")
        return identity

    return dependency
