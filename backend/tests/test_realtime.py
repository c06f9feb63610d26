"""Tests for the connection manager, realtime fan-out and the /ws endpoint."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.auth import create_access_token
from app.main import app
from app.services.realtime import (
    ADMIN_ROOM,
    EVENT_BOOKING_UPDATE,
    EVENT_NEW_ADMIN_NOTIFICATION,
    EVENT_NEW_NOTIFICATION,
    EVENT_SHIPMENT_BOOKING_STATUS,
    ConnectionManager,
    RealtimeFanout,
    user_room,
)
from tests.conftest import FailingBroadcaster, auth_headers


class StubSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.accepted = False
        self.frames: list[dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection reset")
        self.frames.append(data)


class TestConnectionManager:
    @pytest.mark.asyncio
    async def test_room_delivery(self):
        manager = ConnectionManager()
        alice, bob = StubSocket(), StubSocket()

        await manager.connect(alice)
        await manager.connect(bob)
        manager.join(alice, "user-alice")
        await manager.emit("ping", {"n": 1}, room="user-alice")
        await manager.emit("hello", {"n": 2})

        assert alice.accepted and bob.accepted
        assert alice.frames == [
            {"event": "ping", "data": {"n": 1}},
            {"event": "hello", "data": {"n": 2}},
        ]
        assert bob.frames == [{"event": "hello", "data": {"n": 2}}]

    @pytest.mark.asyncio
    async def test_empty_room_is_a_no_op(self):
        await ConnectionManager().emit("ping", {}, room="nobody")

    @pytest.mark.asyncio
    async def test_failed_socket_is_dropped(self):
        manager = ConnectionManager()
        good, bad = StubSocket(), StubSocket(fail=True)

        for socket in (good, bad):
            await manager.connect(socket)
            manager.join(socket, ADMIN_ROOM)
        await manager.emit("ping", {}, room=ADMIN_ROOM)

        assert good.frames == [{"event": "ping", "data": {}}]
        assert bad not in manager.connections
        assert manager.rooms[ADMIN_ROOM] == {good}

    @pytest.mark.asyncio
    async def test_disconnect_removes_empty_rooms(self):
        manager = ConnectionManager()
        socket = StubSocket()
        await manager.connect(socket)
        manager.join(socket, "user-1")
        manager.disconnect(socket)
        assert "user-1" not in manager.rooms
        assert not manager.connections


class TestRealtimeFanout:
    @pytest.mark.asyncio
    async def test_send_failures_are_swallowed(self):
        fanout = RealtimeFanout(FailingBroadcaster())
        await fanout.shipment_booking_status(uuid4(), is_booked=False)


@pytest.fixture
def live_client():
    """Client sharing one event loop between HTTP requests and sockets."""
    with TestClient(app) as client:
        yield client


def _ws_url(user) -> str:
    return f"/ws?token={create_access_token(user.id)}"


class TestWebSocketEndpoint:
    def test_join_own_room(self, live_client, driver):
        with live_client.websocket_connect(_ws_url(driver)) as ws:
            ws.send_json({"event": "join-user-room", "data": str(driver.id)})
            assert ws.receive_json() == {
                "event": "joined",
                "data": {"room": user_room(driver.id)},
            }

    def test_cannot_join_other_users_room(self, live_client, driver, other_driver):
        with live_client.websocket_connect(_ws_url(driver)) as ws:
            ws.send_json({"event": "join-user-room", "data": str(other_driver.id)})
            assert ws.receive_json()["event"] == "error"

    def test_admin_room_requires_admin(self, live_client, driver, admin):
        with live_client.websocket_connect(_ws_url(driver)) as ws:
            ws.send_json({"event": "join-admin-room"})
            reply = ws.receive_json()
            assert reply == {"event": "error", "data": {"message": "Access denied. Admin only."}}

        with live_client.websocket_connect(_ws_url(admin)) as ws:
            ws.send_json({"event": "join-admin-room"})
            assert ws.receive_json()["data"] == {"room": ADMIN_ROOM}

    def test_anonymous_socket_cannot_join(self, live_client, driver):
        with live_client.websocket_connect("/ws") as ws:
            ws.send_json({"event": "join-user-room", "data": str(driver.id)})
            assert ws.receive_json() == {
                "event": "error",
                "data": {"message": "Authentication required"},
            }

    def test_invalid_json(self, live_client, driver):
        with live_client.websocket_connect(_ws_url(driver)) as ws:
            ws.send_text("{not json")
            assert ws.receive_json()["data"] == {"message": "Invalid JSON"}

    def test_booking_events_reach_owner(self, live_client, driver, shipment):
        with live_client.websocket_connect(_ws_url(driver)) as ws:
            ws.send_json({"event": "join-user-room", "data": str(driver.id)})
            ws.receive_json()

            response = live_client.post(
                "/v1/bookings/",
                json={"shipmentId": str(shipment.id)},
                headers=auth_headers(driver),
            )
            assert response.status_code == 201

            notification = ws.receive_json()
            availability = ws.receive_json()
            update = ws.receive_json()

        assert notification["event"] == EVENT_NEW_NOTIFICATION
        assert notification["data"]["msg_key"] == "notifications.user.bookingRequestSent"
        assert availability == {
            "event": EVENT_SHIPMENT_BOOKING_STATUS,
            "data": {
                "shipmentId": str(shipment.id),
                "isBooked": True,
                "bookedBy": "Dinesh",
                "bookingStatus": "Pending",
            },
        }
        assert update["event"] == EVENT_BOOKING_UPDATE
        assert update["data"]["id"] == response.json()["id"]

    def test_booking_events_reach_admins(self, live_client, driver, admin, shipment):
        with live_client.websocket_connect(_ws_url(admin)) as ws:
            ws.send_json({"event": "join-admin-room"})
            ws.receive_json()

            live_client.post(
                "/v1/bookings/",
                json={"shipmentId": str(shipment.id)},
                headers=auth_headers(driver),
            )

            events = [ws.receive_json()["event"] for _ in range(3)]

        assert events == [
            EVENT_NEW_ADMIN_NOTIFICATION,
            EVENT_SHIPMENT_BOOKING_STATUS,
            EVENT_BOOKING_UPDATE,
        ]
