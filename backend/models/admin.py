"""Admin model definitions."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String, UniqueConstraint

from backend.database import Base
from backend.models.credentials import Credentialed


class StaffRole(str, enum.Enum):
    ADMIN = "Admin"
    STAFF = "Staff"


class Admin(Credentialed, Base):
    """Represents a clinic administrator account."""
    __tablename__ = "admins"
    __table_args__ = (
        UniqueConstraint("username", name="uk_admin_username"),
        UniqueConstraint("email", name="uk_admin_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False)
    role = Column(Enum(StaffRole, name="staff_role"), nullable=False, default=StaffRole.STAFF)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    @property
    def display_name(self) -> str:
        return self.username
