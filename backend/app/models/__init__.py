from app.models.booking import Booking, BookingStatus
from app.models.notification import (
    AdminNotification,
    AdminNotificationCategory,
    NotificationPriority,
    NotificationType,
    RelatedModel,
    UserNotification,
    UserNotificationCategory,
)
from app.models.shipment import Shipment, ShipmentStatus
from app.models.user import User, UserRole

__all__ = [
    "AdminNotification",
    "AdminNotificationCategory",
    "Booking",
    "BookingStatus",
    "NotificationPriority",
    "NotificationType",
    "RelatedModel",
    "Shipment",
    "ShipmentStatus",
    "User",
    "UserNotification",
    "UserNotificationCategory",
    "UserRole",
]
