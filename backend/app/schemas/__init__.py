from app.schemas.booking import (
    BookingCreate,
    BookingDeleteResponse,
    BookingResponse,
    BookingStatusUpdate,
    ShipmentSnapshot,
)
from app.schemas.notification import (
    NotificationCountResponse,
    NotificationMessageResponse,
    NotificationResponse,
    UserNotificationCreate,
    UserNotificationResponse,
)
from app.schemas.shipment import ShipmentBookingStatus, ShipmentCreate, ShipmentResponse
from app.schemas.user import UserSummary

__all__ = [
    "BookingCreate",
    "BookingDeleteResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    "NotificationCountResponse",
    "NotificationMessageResponse",
    "NotificationResponse",
    "ShipmentBookingStatus",
    "ShipmentCreate",
    "ShipmentResponse",
    "ShipmentSnapshot",
    "UserNotificationCreate",
    "UserNotificationResponse",
    "UserSummary",
]
