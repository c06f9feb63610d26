"""Service for recording notifications and pushing them to connected clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.booking import BookingStatus
from app.models.notification import (
    AdminNotification,
    NotificationPriority,
    NotificationType,
    RelatedModel,
    UserNotification,
)
from app.repositories.notification_repository import (
    AdminNotificationRepository,
    UserNotificationRepository,
)
from app.services.realtime import RealtimeFanout

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    ADMIN = "admin"
    USER = "user"


# Notification events
EVENT_BOOKING_REQUESTED = "booking.requested"
EVENT_BOOKING_REQUEST_SENT = "booking.request_sent"
EVENT_BOOKING_APPROVED = "booking.approved"
EVENT_BOOKING_REJECTED = "booking.rejected"
EVENT_BOOKING_CANCELLED = "booking.cancelled"
EVENT_BOOKING_COMPLETED = "booking.completed"
EVENT_BOOKING_STATUS_UPDATED = "booking.status_updated"
EVENT_BOOKING_CANCELLED_BY_USER = "booking.cancelled_by_user"


@dataclass(frozen=True)
class NotificationTemplate:
    """Literal fallback text plus the template key clients localize with."""

    category: str
    title: str
    message: str
    msg_key: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    notification_type: NotificationType = NotificationType.INFO


NOTIFICATION_TEMPLATES: dict[str, NotificationTemplate] = {
    EVENT_BOOKING_REQUESTED: NotificationTemplate(
        category="booking",
        title="New Booking Request",
        message=(
            "{userName} ({phone}) has requested to book shipment {origin} to "
            "{destination}. Booking ID: {bookingId}"
        ),
        msg_key="notifications.admin.newBookingRequest",
        priority=NotificationPriority.HIGH,
        notification_type=NotificationType.INFO,
    ),
    EVENT_BOOKING_REQUEST_SENT: NotificationTemplate(
        category="booking",
        title="Booking Request Sent Successfully",
        message=(
            "Your booking request for shipment {origin} to {destination} has been "
            "sent successfully. Booking ID: {bookingId}. Status: Pending approval."
        ),
        msg_key="notifications.user.bookingRequestSent",
        priority=NotificationPriority.MEDIUM,
        notification_type=NotificationType.SUCCESS,
    ),
    EVENT_BOOKING_APPROVED: NotificationTemplate(
        category="booking",
        title="Booking Approved",
        message=(
            "Your booking has been approved! Shipment: {origin} to {destination}. "
            "Booking ID: {bookingId}. The shipment is now in transit."
        ),
        msg_key="notifications.user.bookingApproved",
        priority=NotificationPriority.HIGH,
        notification_type=NotificationType.SUCCESS,
    ),
    EVENT_BOOKING_REJECTED: NotificationTemplate(
        category="booking",
        title="Booking Rejected",
        message=(
            "Your booking request has been rejected. Shipment: {origin} to "
            "{destination}. Booking ID: {bookingId}."
        ),
        msg_key="notifications.user.bookingRejected",
        priority=NotificationPriority.MEDIUM,
        notification_type=NotificationType.ERROR,
    ),
    EVENT_BOOKING_CANCELLED: NotificationTemplate(
        category="booking",
        title="Booking Cancelled",
        message=(
            "Your booking has been cancelled. Shipment: {origin} to {destination}. "
            "Booking ID: {bookingId}."
        ),
        msg_key="notifications.user.bookingCancelled",
        priority=NotificationPriority.LOW,
        notification_type=NotificationType.WARNING,
    ),
    EVENT_BOOKING_COMPLETED: NotificationTemplate(
        category="booking",
        title="Booking Completed",
        message=(
            "Your booking has been completed successfully! Shipment: {origin} to "
            "{destination}. Booking ID: {bookingId}."
        ),
        msg_key="notifications.user.bookingCompleted",
        priority=NotificationPriority.LOW,
        notification_type=NotificationType.SUCCESS,
    ),
    EVENT_BOOKING_STATUS_UPDATED: NotificationTemplate(
        category="booking",
        title="Booking Updated",
        message=(
            "Your booking status has been updated to {status}. Shipment: {origin} "
            "to {destination}. Booking ID: {bookingId}."
        ),
        msg_key="notifications.user.bookingStatusUpdated",
        priority=NotificationPriority.LOW,
        notification_type=NotificationType.INFO,
    ),
    EVENT_BOOKING_CANCELLED_BY_USER: NotificationTemplate(
        category="booking",
        title="Booking Cancelled by User",
        message=(
            "{userName} cancelled booking {bookingId} for shipment {origin} to "
            "{destination}."
        ),
        msg_key="notifications.admin.bookingCancelledByUser",
        priority=NotificationPriority.MEDIUM,
        notification_type=NotificationType.WARNING,
    ),
}

_STATUS_EVENTS = {
    BookingStatus.APPROVED: EVENT_BOOKING_APPROVED,
    BookingStatus.REJECTED: EVENT_BOOKING_REJECTED,
    BookingStatus.CANCELLED: EVENT_BOOKING_CANCELLED,
    BookingStatus.COMPLETED: EVENT_BOOKING_COMPLETED,
}


def event_for_status(status: BookingStatus) -> str:
    """Return the user notification event for a booking status change."""
    return _STATUS_EVENTS.get(status, EVENT_BOOKING_STATUS_UPDATED)


class NotificationDispatcher:
    """Persist a notification record, then try to deliver it in real time.

    The record is written first; a failed delivery only gets logged and the
    record stays unread for the recipient to fetch later.
    """

    def __init__(self, db: Session, fanout: RealtimeFanout):
        self.db = db
        self.fanout = fanout
        self.admin_repo = AdminNotificationRepository(db)
        self.user_repo = UserNotificationRepository(db)

    async def notify(
        self,
        kind: NotificationKind,
        event: str,
        payload: dict[str, Any],
        *,
        user_id: UUID | None = None,
        related_id: UUID | None = None,
        related_model: RelatedModel | None = RelatedModel.BOOKING,
    ) -> AdminNotification | UserNotification:
        """Create and deliver the notification for ``event``.

        Args:
            kind: Admin inbox or a single user's inbox.
            event: Key into ``NOTIFICATION_TEMPLATES``.
            payload: Template parameters; stored with the record so clients can
                render it in any locale.
            user_id: Recipient, required for user notifications.
            related_id: The booking or shipment that caused the notification.
            related_model: Model of ``related_id``.

        Raises:
            KeyError: If ``event`` is unknown.
            ValueError: If a user notification has no recipient.
            SQLAlchemyError: If the record could not be stored.
        """
        template = NOTIFICATION_TEMPLATES[event]
        fields: dict[str, Any] = {
            "type": template.category,
            "title": template.title,
            "message": template.message.format(**payload),
            "msg_key": template.msg_key,
            "params": payload,
            "related_id": related_id,
            "related_model": related_model.value if related_model else None,
            "priority": template.priority.value,
            "notification_type": template.notification_type.value,
        }

        try:
            if kind == NotificationKind.ADMIN:
                admin_notification = self.admin_repo.create(**fields)
            else:
                if user_id is None:
                    raise ValueError("User notifications need a recipient")
                user_notification = self.user_repo.create(user_id=user_id, **fields)
        except SQLAlchemyError:
            self.db.rollback()
            raise

        if kind == NotificationKind.ADMIN:
            await self.fanout.admin_notification(admin_notification)
            return admin_notification
        await self.fanout.user_notification(user_notification)
        return user_notification
