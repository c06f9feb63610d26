"""WebSocket endpoint for realtime booking and notification events."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from app.core.auth import authenticate_token, is_admin
from app.core.database import get_db
from app.models.user import User
from app.services.realtime import ADMIN_ROOM, ConnectionManager, user_room

logger = logging.getLogger(__name__)

router = APIRouter()

JOIN_USER_ROOM = "join-user-room"
JOIN_ADMIN_ROOM = "join-admin-room"


def _room_for(message: Any, user: User | None) -> tuple[str | None, str | None]:
    """Return ``(room, None)`` for an allowed join, ``(None, reason)`` otherwise."""
    if not isinstance(message, dict):
        return None, "Malformed message"
    event = message.get("event")
    if event not in (JOIN_USER_ROOM, JOIN_ADMIN_ROOM):
        return None, f"Unknown event: {event}"
    if user is None:
        return None, "Authentication required"

    if event == JOIN_ADMIN_ROOM:
        if not is_admin(user):
            return None, "Access denied. Admin only."
        return ADMIN_ROOM, None

    requested = str(message.get("data") or "")
    if requested != str(user.id):
        return None, "Cannot join another user's room"
    return user_room(user.id), None


@router.websocket("/ws")
async def realtime(
    websocket: WebSocket,
    token: str | None = None,
    db: Session = Depends(get_db),
) -> None:
    """Accept a client and serve room joins until it disconnects.

    Anonymous sockets still receive events broadcast to everyone, such as
    shipment availability changes.
    """
    manager: ConnectionManager = websocket.app.state.connections
    user = authenticate_token(token, db) if token else None
    db.close()

    await manager.connect(websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "data": {"message": "Invalid JSON"}})
                continue

            room, reason = _room_for(message, user)
            if room is None:
                await websocket.send_json({"event": "error", "data": {"message": reason}})
                continue
            manager.join(websocket, room)
            await websocket.send_json({"event": "joined", "data": {"room": room}})
    except WebSocketDisconnect:
        logger.info("Socket disconnected")
    finally:
        manager.disconnect(websocket)
