"""Tests for the notification dispatcher, repositories and inbox endpoints."""

from uuid import uuid4

import pytest

from app.models.booking import BookingStatus
from app.models.notification import RelatedModel
from app.repositories.notification_repository import (
    AdminNotificationRepository,
    UserNotificationRepository,
)
from app.services.notification_service import (
    EVENT_BOOKING_APPROVED,
    EVENT_BOOKING_REQUESTED,
    NOTIFICATION_TEMPLATES,
    NotificationDispatcher,
    NotificationKind,
    event_for_status,
)
from app.services.realtime import (
    ADMIN_ROOM,
    EVENT_NEW_ADMIN_NOTIFICATION,
    EVENT_NEW_NOTIFICATION,
    RealtimeFanout,
    user_room,
)
from tests.conftest import FailingBroadcaster, auth_headers


@pytest.fixture
def admin_repo(db_session):
    return AdminNotificationRepository(db_session)


@pytest.fixture
def user_repo(db_session):
    return UserNotificationRepository(db_session)


def _seed_user_notification(repo, user, **overrides):
    fields = {
        "user_id": user.id,
        "type": "booking",
        "title": "Booking Approved",
        "message": "Your booking has been approved!",
    }
    fields.update(overrides)
    return repo.create(**fields)


def _seed_admin_notification(repo, **overrides):
    fields = {
        "type": "booking",
        "title": "New Booking Request",
        "message": "Dinesh has requested to book shipment Chennai to Mumbai.",
    }
    fields.update(overrides)
    return repo.create(**fields)


class TestNotificationDispatcher:
    @pytest.mark.asyncio
    async def test_admin_notification_persisted_and_pushed(self, db_session, broadcaster):
        dispatcher = NotificationDispatcher(db_session, RealtimeFanout(broadcaster))
        related = uuid4()
        payload = {
            "userName": "Dinesh",
            "phone": "+91 98400 00001",
            "origin": "Chennai",
            "destination": "Mumbai",
            "bookingId": "D10001",
        }

        record = await dispatcher.notify(
            NotificationKind.ADMIN, EVENT_BOOKING_REQUESTED, payload, related_id=related
        )

        assert record.title == "New Booking Request"
        assert record.message == (
            "Dinesh (+91 98400 00001) has requested to book shipment Chennai to "
            "Mumbai. Booking ID: D10001"
        )
        assert record.msg_key == "notifications.admin.newBookingRequest"
        assert record.params == payload
        assert record.priority == "high"
        assert record.related_model == RelatedModel.BOOKING.value
        assert record.read is False

        [(event, data, room)] = broadcaster.events
        assert (event, room) == (EVENT_NEW_ADMIN_NOTIFICATION, ADMIN_ROOM)
        assert data["id"] == str(record.id)

    @pytest.mark.asyncio
    async def test_user_notification_goes_to_user_room(self, db_session, broadcaster, driver):
        dispatcher = NotificationDispatcher(db_session, RealtimeFanout(broadcaster))
        payload = {"origin": "Chennai", "destination": "Mumbai", "bookingId": "D10001"}

        record = await dispatcher.notify(
            NotificationKind.USER, EVENT_BOOKING_APPROVED, payload, user_id=driver.id
        )

        assert record.user_id == driver.id
        assert record.notification_type == "success"
        [(event, data, room)] = broadcaster.events
        assert event == EVENT_NEW_NOTIFICATION
        assert room == user_room(driver.id)
        assert data["msg_key"] == "notifications.user.bookingApproved"

    @pytest.mark.asyncio
    async def test_record_survives_failed_delivery(self, db_session, user_repo, driver):
        dispatcher = NotificationDispatcher(db_session, RealtimeFanout(FailingBroadcaster()))
        payload = {"origin": "Chennai", "destination": "Mumbai", "bookingId": "D10001"}

        await dispatcher.notify(
            NotificationKind.USER, EVENT_BOOKING_APPROVED, payload, user_id=driver.id
        )

        assert user_repo.count_unread(driver.id) == 1

    @pytest.mark.asyncio
    async def test_user_notification_needs_recipient(self, db_session, broadcaster):
        dispatcher = NotificationDispatcher(db_session, RealtimeFanout(broadcaster))
        with pytest.raises(ValueError):
            await dispatcher.notify(
                NotificationKind.USER,
                EVENT_BOOKING_APPROVED,
                {"origin": "A", "destination": "B", "bookingId": "X"},
            )
        assert broadcaster.events == []

    @pytest.mark.asyncio
    async def test_unknown_event(self, db_session, broadcaster):
        dispatcher = NotificationDispatcher(db_session, RealtimeFanout(broadcaster))
        with pytest.raises(KeyError):
            await dispatcher.notify(NotificationKind.ADMIN, "booking.teleported", {})

    def test_every_template_has_a_key(self):
        for template in NOTIFICATION_TEMPLATES.values():
            assert template.msg_key.startswith("notifications.")

    def test_event_for_status(self):
        assert event_for_status(BookingStatus.APPROVED) == EVENT_BOOKING_APPROVED
        assert event_for_status(BookingStatus.PENDING) == "booking.status_updated"


class TestAdminNotificationsApi:
    def test_admin_only(self, client, driver):
        response = client.get("/v1/admin/notifications/", headers=auth_headers(driver))
        assert response.status_code == 403

    def test_list_and_filter(self, client, admin, admin_repo):
        _seed_admin_notification(admin_repo)
        _seed_admin_notification(admin_repo, type="system", title="Maintenance")
        read = _seed_admin_notification(admin_repo)
        admin_repo.mark_as_read(read)

        everything = client.get("/v1/admin/notifications/", headers=auth_headers(admin))
        assert everything.status_code == 200
        assert len(everything.json()) == 3

        system = client.get(
            "/v1/admin/notifications/", params={"type": "system"}, headers=auth_headers(admin)
        )
        assert [n["title"] for n in system.json()] == ["Maintenance"]

        unread = client.get(
            "/v1/admin/notifications/", params={"read": "false"}, headers=auth_headers(admin)
        )
        assert len(unread.json()) == 2

    def test_unread_count_and_mark_read(self, client, admin, admin_repo):
        first = _seed_admin_notification(admin_repo)
        _seed_admin_notification(admin_repo)

        count = client.get("/v1/admin/notifications/unread/count", headers=auth_headers(admin))
        assert count.json() == {"count": 2}

        marked = client.put(
            f"/v1/admin/notifications/{first.id}/read", headers=auth_headers(admin)
        )
        assert marked.status_code == 200
        assert marked.json()["read"] is True

        read_all = client.put("/v1/admin/notifications/read-all", headers=auth_headers(admin))
        assert read_all.json() == {"count": 1}
        count = client.get("/v1/admin/notifications/unread/count", headers=auth_headers(admin))
        assert count.json() == {"count": 0}

    def test_get_and_delete(self, client, admin, admin_repo):
        notification = _seed_admin_notification(admin_repo)
        url = f"/v1/admin/notifications/{notification.id}"

        assert client.get(url, headers=auth_headers(admin)).json()["title"] == "New Booking Request"
        assert client.delete(url, headers=auth_headers(admin)).status_code == 200
        assert client.get(url, headers=auth_headers(admin)).status_code == 404

    def test_delete_all(self, client, admin, admin_repo):
        _seed_admin_notification(admin_repo)
        _seed_admin_notification(admin_repo)

        response = client.delete("/v1/admin/notifications/all", headers=auth_headers(admin))
        assert response.json() == {"message": "All notifications deleted"}
        assert client.get("/v1/admin/notifications/", headers=auth_headers(admin)).json() == []


class TestUserNotificationsApi:
    def test_requires_auth(self, client):
        assert client.get("/v1/users/notifications/").status_code == 401

    def test_only_own_notifications(self, client, driver, other_driver, user_repo):
        _seed_user_notification(user_repo, driver)
        theirs = _seed_user_notification(user_repo, other_driver)

        mine = client.get("/v1/users/notifications/", headers=auth_headers(driver))
        assert len(mine.json()) == 1
        assert mine.json()[0]["user_id"] == str(driver.id)

        foreign = client.get(
            f"/v1/users/notifications/{theirs.id}", headers=auth_headers(driver)
        )
        assert foreign.status_code == 404
        assert (
            client.delete(
                f"/v1/users/notifications/{theirs.id}", headers=auth_headers(driver)
            ).status_code
            == 404
        )

    def test_unread_count_and_read_all(self, client, driver, other_driver, user_repo):
        first = _seed_user_notification(user_repo, driver)
        _seed_user_notification(user_repo, driver, type="update")
        _seed_user_notification(user_repo, other_driver)

        headers = auth_headers(driver)
        assert client.get("/v1/users/notifications/unread/count", headers=headers).json() == {
            "count": 2
        }
        client.put(f"/v1/users/notifications/{first.id}/read", headers=headers)
        assert client.put("/v1/users/notifications/read-all", headers=headers).json() == {
            "count": 1
        }
        assert user_repo.count_unread(other_driver.id) == 1

        updates = client.get(
            "/v1/users/notifications/", params={"type": "update"}, headers=headers
        )
        assert len(updates.json()) == 1

    def test_create_pushes_to_own_room(self, client, driver, broadcaster):
        response = client.post(
            "/v1/users/notifications/",
            json={"title": "Reminder", "message": "Pickup at 6am", "params": {"hour": 6}},
            headers=auth_headers(driver),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "system"
        assert data["priority"] == "medium"
        assert data["notification_type"] == "info"
        assert data["params"] == {"hour": 6}
        [(event, payload, room)] = broadcaster.events
        assert event == EVENT_NEW_NOTIFICATION
        assert room == user_room(driver.id)
        assert payload["id"] == data["id"]

    def test_delete_all_only_touches_own(self, client, driver, other_driver, user_repo):
        _seed_user_notification(user_repo, driver)
        _seed_user_notification(user_repo, other_driver)

        response = client.delete("/v1/users/notifications/all", headers=auth_headers(driver))
        assert response.status_code == 200
        assert client.get("/v1/users/notifications/", headers=auth_headers(driver)).json() == []
        assert user_repo.count_unread(other_driver.id) == 1
