"""Real-time fan-out of booking and notification events over WebSockets.

Connections are grouped into rooms: one per user (``user-<id>``) and one shared
by admins (``admin-room``). Delivery is fire-and-forget: there is no
acknowledgement or replay, clients re-fetch state when they reconnect.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Protocol
from uuid import UUID

from fastapi import Request, WebSocket

from app.models.booking import Booking
from app.models.notification import AdminNotification, UserNotification
from app.schemas.booking import BookingResponse
from app.schemas.notification import NotificationResponse, UserNotificationResponse
from app.schemas.shipment import ShipmentBookingStatus

logger = logging.getLogger(__name__)

ADMIN_ROOM = "admin-room"

EVENT_NEW_NOTIFICATION = "new-notification"
EVENT_NEW_ADMIN_NOTIFICATION = "new-admin-notification"
EVENT_BOOKING_UPDATE = "booking-update"
EVENT_SHIPMENT_BOOKING_STATUS = "shipment-booking-status"


def user_room(user_id: UUID | str) -> str:
    return f"user-{user_id}"


class Broadcaster(Protocol):
    """Anything that can push an event to a room, or to everyone."""

    async def emit(self, event: str, data: Any, room: str | None = None) -> None: ...


class ConnectionManager:
    """Tracks open WebSocket connections and their room memberships."""

    def __init__(self) -> None:
        self.connections: set[WebSocket] = set()
        self.rooms: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.add(websocket)

    def join(self, websocket: WebSocket, room: str) -> None:
        self.rooms[room].add(websocket)
        logger.info("Socket joined room %s", room)

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.discard(websocket)
        for room in list(self.rooms):
            self.rooms[room].discard(websocket)
            if not self.rooms[room]:
                del self.rooms[room]

    async def emit(self, event: str, data: Any, room: str | None = None) -> None:
        targets = list(self.rooms.get(room, ())) if room is not None else list(self.connections)
        if not targets:
            return
        frame = {"event": event, "data": data}
        results = await asyncio.gather(
            *(websocket.send_json(frame) for websocket in targets),
            return_exceptions=True,
        )
        for websocket, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Dropping socket after failed send of %s: %s", event, result)
                self.disconnect(websocket)


def get_broadcaster(request: Request) -> Broadcaster:
    """Return the broadcaster attached to the running application."""
    return request.app.state.broadcaster  # type: ignore[no-any-return]


class RealtimeFanout:
    """Maps domain events to rooms and never lets a failed send escape."""

    def __init__(self, broadcaster: Broadcaster):
        self.broadcaster = broadcaster

    async def _emit(self, event: str, data: Any, room: str | None = None) -> None:
        try:
            await self.broadcaster.emit(event, data, room=room)
        except Exception:
            logger.exception("Failed to emit %s to %s", event, room or "all clients")

    async def user_notification(self, notification: UserNotification) -> None:
        payload = UserNotificationResponse.model_validate(notification).model_dump(mode="json")
        await self._emit(EVENT_NEW_NOTIFICATION, payload, room=user_room(notification.user_id))

    async def admin_notification(self, notification: AdminNotification) -> None:
        payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
        await self._emit(EVENT_NEW_ADMIN_NOTIFICATION, payload, room=ADMIN_ROOM)

    async def booking_update(self, booking: Booking | BookingResponse) -> None:
        if isinstance(booking, Booking):
            booking = BookingResponse.model_validate(booking)
        payload = booking.model_dump(mode="json")
        await self._emit(EVENT_BOOKING_UPDATE, payload, room=user_room(booking.user_id))
        await self._emit(EVENT_BOOKING_UPDATE, payload, room=ADMIN_ROOM)

    async def shipment_booking_status(
        self,
        shipment_id: UUID,
        *,
        is_booked: bool,
        booked_by: str | None = None,
        booking_status: str | None = None,
    ) -> None:
        status = ShipmentBookingStatus(
            shipment_id=shipment_id,
            is_booked=is_booked,
            booked_by=booked_by,
            booking_status=booking_status,
        )
        await self._emit(
            EVENT_SHIPMENT_BOOKING_STATUS,
            status.model_dump(mode="json", by_alias=True),
        )
