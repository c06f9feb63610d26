"""User model.

Users are registered and authenticated by an external service; this table is
the read side the booking core needs (display name, phone, role).
"""

from enum import Enum

from sqlalchemy import Column, DateTime, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    vehicle_number = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
