"""Password-login capability shared by the account types that support it."""

from sqlalchemy import Column, String

from backend.auth import passwords


class Credentialed:
    """Mixin for entities that can authenticate with a password.

    Only account tables that actually store a password hash inherit from this.
    Login code accepts ``Credentialed`` instances, so an entity without it
    cannot reach password verification at all.
    """

    password_hash = Column(String(255), nullable=False)

    def set_password(self, plain_password: str) -> None:
        self.password_hash = passwords.hash_password(plain_password)

    def verify_password(self, plain_password: str) -> bool:
        if not self.password_hash:
            return False
        return passwords.verify_password(plain_password, self.password_hash)
