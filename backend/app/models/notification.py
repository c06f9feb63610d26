"""Notification models for the admin and carrier inboxes."""

from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(str, Enum):
    """Display style of a notification (toast colour on the client)."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class AdminNotificationCategory(str, Enum):
    BOOKING = "booking"
    SHIPMENT = "shipment"
    USER = "user"
    SYSTEM = "system"


class UserNotificationCategory(str, Enum):
    BOOKING = "booking"
    SHIPMENT = "shipment"
    SYSTEM = "system"
    UPDATE = "update"


class RelatedModel(str, Enum):
    BOOKING = "Booking"
    SHIPMENT = "Shipment"
    USER = "User"


class AdminNotification(Base):
    """Notification shared by every admin."""

    __tablename__ = "admin_notifications"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    type = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    msg_key = Column(String(255), nullable=True)
    params = Column(JSON, nullable=True)
    related_id = Column(UUIDType, nullable=True)
    related_model = Column(String(20), nullable=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    notification_type = Column(String(10), nullable=False, default=NotificationType.INFO.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserNotification(Base):
    """Notification addressed to a single carrier."""

    __tablename__ = "user_notifications"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    user_id = Column(
        UUIDType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    msg_key = Column(String(255), nullable=True)
    params = Column(JSON, nullable=True)
    related_id = Column(UUIDType, nullable=True)
    related_model = Column(String(20), nullable=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    notification_type = Column(String(10), nullable=False, default=NotificationType.INFO.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
