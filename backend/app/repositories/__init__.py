from app.repositories.booking_repository import BookingRepository
from app.repositories.notification_repository import (
    AdminNotificationRepository,
    UserNotificationRepository,
)
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "AdminNotificationRepository",
    "BookingRepository",
    "ShipmentRepository",
    "UserNotificationRepository",
    "UserRepository",
]
