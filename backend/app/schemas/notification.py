"""Pydantic schemas for admin and user notifications."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.notification import (
    NotificationPriority,
    NotificationType,
    RelatedModel,
    UserNotificationCategory,
)


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    title: str
    message: str
    msg_key: str | None = None
    params: dict[str, Any] | None = None
    related_id: UUID | None = None
    related_model: str | None = None
    read: bool
    priority: str
    notification_type: str
    created_at: datetime


class UserNotificationResponse(NotificationResponse):
    user_id: UUID


class UserNotificationCreate(BaseModel):
    type: UserNotificationCategory = UserNotificationCategory.SYSTEM
    title: str = Field(default="Notification", max_length=255)
    message: str = Field(default="", max_length=1000)
    msg_key: str | None = Field(default=None, max_length=255)
    params: dict[str, Any] = Field(default_factory=dict)
    related_id: UUID | None = None
    related_model: RelatedModel | None = None
    priority: NotificationPriority = NotificationPriority.MEDIUM
    notification_type: NotificationType = NotificationType.INFO


class NotificationCountResponse(BaseModel):
    count: int


class NotificationMessageResponse(BaseModel):
    message: str
