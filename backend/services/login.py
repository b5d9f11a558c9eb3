"""Password login for the account types that carry a password."""

import logging
from dataclasses import dataclass

from backend.auth import jwt_handler
from backend.auth.identity import Role
from backend.core.config import JwtSettings
from backend.models.admin import Admin
from backend.models.credentials import Credentialed
from backend.models.patient import Patient
from backend.repositories.scheduling_store import SchedulingStore
from backend.services.errors import Unauthenticated, ValidationFailure

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials.'


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: int
    role: Role
    display_name: str


class LoginService:
    def __init__(self, store: SchedulingStore, settings: JwtSettings):
        self.store = store
        self.settings = settings

    def _find_admin(self, username_or_email: str) -> Admin | None:
        return self.store.find_admin_by_login(username_or_email)

    def _find_patient(self, email: str) -> Patient | None:
        return self.store.find_patient_by_email(email)

    def _find_account(self, role: Role, identifier: str) -> Credentialed | None:
        if role is Role.ADMIN:
            return self._find_admin(identifier)
        if role is Role.PATIENT:
            return self._find_patient(identifier)
        raise ValidationFailure(f'Password authentication is not available for role {role.value}.')

    def login(self, role: Role | str, identifier: str | None, password: str | None) -> LoginResult:
        parsed_role = Role.parse(role)
        if parsed_role is None:
            raise ValidationFailure('Unknown role.')
        if not identifier or not identifier.strip() or not password:
            raise ValidationFailure('Username/email and password required.')

        account = self._find_account(parsed_role, identifier.strip())
        if account is None or not account.verify_password(password):
            logger.info('Failed %s login for %s', parsed_role.value.lower(), identifier.strip())
            raise Unauthenticated(INVALID_CREDENTIALS)

        if isinstance(account, Admin):
            subject = account.email or account.username
        else:
            subject = account.email
        token = jwt_handler.create_access_token(
            subject=subject,
            role=parsed_role.value,
            user_id=account.id,
            settings=self.settings,
        )
        logger.info('%s %s logged in', parsed_role.value.capitalize(), account.id)
        return LoginResult(
            token=token,
            user_id=account.id,
            role=parsed_role,
            display_name=account.display_name,
        )
