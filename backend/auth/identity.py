"""Bearer credential → identity resolution.

The resolver never raises for a bad credential. It reports one of three states:
``ABSENT`` (nothing supplied), ``INVALID`` (undecodable, expired, wrong role, or
the account behind it no longer exists) and ``VALID``.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

import jwt

from backend.auth import jwt_handler
from backend.core.config import JwtSettings
from backend.services.errors import Unauthenticated

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    PATIENT = "PATIENT"

    @classmethod
    def parse(cls, value) -> "Role | None":
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class ResolutionState(str, enum.Enum):
    VALID = "valid"
    INVALID = "invalid"
    ABSENT = "absent"


@dataclass(frozen=True)
class Identity:
    subject: str
    role: Role
    user_id: int
    expires_at: datetime

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


@dataclass(frozen=True)
class Resolution:
    state: ResolutionState
    identity: Identity | None = None
    reason: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.state is ResolutionState.VALID


class UserLookup(Protocol):
    def find_admin_by_id(self, admin_id: int): ...

    def find_doctor_by_id(self, doctor_id: int): ...

    def find_patient_by_id(self, patient_id: int): ...


def _parse_user_id(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdecimal():
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _expiry(value) -> datetime | None:
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, TypeError, ValueError):
        return None


class IdentityResolver:
    def __init__(self, settings: JwtSettings, users: UserLookup):
        self.settings = settings
        self.users = users

    def resolve(self, raw_credential: str | None, expected_role: Role | str | None = None) -> Resolution:
        token = jwt_handler.strip_bearer(raw_credential)
        if token is None:
            return Resolution(ResolutionState.ABSENT, reason="Token missing")

        try:
            claims = jwt_handler.decode_access_token(token, self.settings)
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer credential: %s", exc)
            return Resolution(ResolutionState.INVALID, reason="Invalid or expired token")

        role = Role.parse(claims.get("role"))
        user_id = _parse_user_id(claims.get("uid"))
        subject = claims.get("sub")
        expires_at = _expiry(claims.get("exp"))
        if role is None or user_id is None or not subject or expires_at is None:
            return Resolution(ResolutionState.INVALID, reason="Token is missing identity claims")

        if expected_role is not None and Role.parse(expected_role) is not role:
            return Resolution(ResolutionState.INVALID, reason="Token does not carry the required role")

        if not self._account_exists(role, user_id):
            logger.info("Rejected credential for deleted %s account %s", role.value.lower(), user_id)
            return Resolution(ResolutionState.INVALID, reason="Account no longer exists")

        identity = Identity(
            subject=subject,
            role=role,
            user_id=user_id,
            expires_at=expires_at,
        )
        return Resolution(ResolutionState.VALID, identity=identity)

    def is_valid(self, raw_credential: str | None, expected_role: Role | str | None = None) -> bool:
        return self.resolve(raw_credential, expected_role).is_valid

    def require(self, raw_credential: str | None) -> Identity:
        resolution = self.resolve(raw_credential)
        if not resolution.is_valid:
            raise Unauthenticated(resolution.reason or "Not authenticated")
        return resolution.identity

    def _account_exists(self, role: Role, user_id: int) -> bool:
        if role is Role.ADMIN:
            return self.users.find_admin_by_id(user_id) is not None
        if role is Role.DOCTOR:
            return self.users.find_doctor_by_id(user_id) is not None
        return self.users.find_patient_by_id(user_id) is not None
