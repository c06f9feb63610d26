"""Repositories for admin and user notification CRUD operations."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.notification import AdminNotification, UserNotification


class AdminNotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        type: str,
        title: str,
        message: str,
        msg_key: str | None = None,
        params: dict[str, Any] | None = None,
        related_id: UUID | None = None,
        related_model: str | None = None,
        priority: str = "medium",
        notification_type: str = "info",
    ) -> AdminNotification:
        notification = AdminNotification(
            type=type,
            title=title,
            message=message,
            msg_key=msg_key,
            params=params or {},
            related_id=related_id,
            related_model=related_model,
            priority=priority,
            notification_type=notification_type,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: UUID) -> AdminNotification | None:
        return (
            self.db.query(AdminNotification)
            .filter(AdminNotification.id == notification_id)
            .first()
        )

    def get_all(
        self,
        skip: int = 0,
        limit: int = 50,
        type: str | None = None,
        read: bool | None = None,
    ) -> list[AdminNotification]:
        query = self.db.query(AdminNotification)
        if type is not None:
            query = query.filter(AdminNotification.type == type)
        if read is not None:
            query = query.filter(AdminNotification.read == read)
        return (
            query.order_by(AdminNotification.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_unread(self) -> int:
        return (
            self.db.query(AdminNotification)
            .filter(AdminNotification.read == False)  # noqa: E712
            .count()
        )

    def mark_as_read(self, notification: AdminNotification) -> AdminNotification:
        notification.read = True  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self) -> int:
        count = (
            self.db.query(AdminNotification)
            .filter(AdminNotification.read == False)  # noqa: E712
            .update({"read": True})
        )
        self.db.commit()
        return count

    def delete(self, notification: AdminNotification) -> None:
        self.db.delete(notification)
        self.db.commit()

    def delete_all(self) -> int:
        count = self.db.query(AdminNotification).delete()
        self.db.commit()
        return count


class UserNotificationRepository:
    """Every query is scoped to the owning user."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        user_id: UUID,
        type: str,
        title: str,
        message: str,
        msg_key: str | None = None,
        params: dict[str, Any] | None = None,
        related_id: UUID | None = None,
        related_model: str | None = None,
        priority: str = "medium",
        notification_type: str = "info",
    ) -> UserNotification:
        notification = UserNotification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            msg_key=msg_key,
            params=params or {},
            related_id=related_id,
            related_model=related_model,
            priority=priority,
            notification_type=notification_type,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: UUID, user_id: UUID) -> UserNotification | None:
        return (
            self.db.query(UserNotification)
            .filter(
                UserNotification.id == notification_id,
                UserNotification.user_id == user_id,
            )
            .first()
        )

    def get_all(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50,
        type: str | None = None,
        read: bool | None = None,
    ) -> list[UserNotification]:
        query = self.db.query(UserNotification).filter(UserNotification.user_id == user_id)
        if type is not None:
            query = query.filter(UserNotification.type == type)
        if read is not None:
            query = query.filter(UserNotification.read == read)
        return (
            query.order_by(UserNotification.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_unread(self, user_id: UUID) -> int:
        return (
            self.db.query(UserNotification)
            .filter(
                UserNotification.user_id == user_id,
                UserNotification.read == False,  # noqa: E712
            )
            .count()
        )

    def mark_as_read(self, notification: UserNotification) -> UserNotification:
        notification.read = True  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: UUID) -> int:
        count = (
            self.db.query(UserNotification)
            .filter(
                UserNotification.user_id == user_id,
                UserNotification.read == False,  # noqa: E712
            )
            .update({"read": True})
        )
        self.db.commit()
        return count

    def delete(self, notification: UserNotification) -> None:
        self.db.delete(notification)
        self.db.commit()

    def delete_all(self, user_id: UUID) -> int:
        count = (
            self.db.query(UserNotification)
            .filter(UserNotification.user_id == user_id)
            .delete()
        )
        self.db.commit()
        return count
