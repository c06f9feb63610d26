"""User notification API endpoints. Every route is scoped to the caller."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.database import get_db
from app.models.notification import UserNotification, UserNotificationCategory
from app.models.user import User
from app.repositories.notification_repository import UserNotificationRepository
from app.schemas.notification import (
    NotificationCountResponse,
    NotificationMessageResponse,
    UserNotificationCreate,
    UserNotificationResponse,
)
from app.services.realtime import Broadcaster, RealtimeFanout, get_broadcaster

router = APIRouter()


@router.get(
    "/unread/count",
    response_model=NotificationCountResponse,
    summary="Get unread notification count",
    responses={401: {"description": "Unauthorized"}},
)
async def get_unread_count(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationCountResponse:
    repo = UserNotificationRepository(db)
    return NotificationCountResponse(count=repo.count_unread(user.id))  # type: ignore[arg-type]


@router.get(
    "/",
    response_model=list[UserNotificationResponse],
    summary="List my notifications",
    responses={401: {"description": "Unauthorized"}},
)
async def list_notifications(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    type: UserNotificationCategory | None = None,
    read: bool | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[UserNotification]:
    repo = UserNotificationRepository(db)
    return repo.get_all(
        user.id,  # type: ignore[arg-type]
        skip=skip,
        limit=limit,
        type=type.value if type else None,
        read=read,
    )


@router.post(
    "/",
    response_model=UserNotificationResponse,
    status_code=201,
    summary="Create a notification for myself",
    responses={401: {"description": "Unauthorized"}},
)
async def create_notification(
    data: UserNotificationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> UserNotification:
    """Store a client-generated notification and push it to the caller's room."""
    repo = UserNotificationRepository(db)
    notification = repo.create(
        user_id=user.id,  # type: ignore[arg-type]
        type=data.type.value,
        title=data.title,
        message=data.message,
        msg_key=data.msg_key,
        params=data.params,
        related_id=data.related_id,
        related_model=data.related_model.value if data.related_model else None,
        priority=data.priority.value,
        notification_type=data.notification_type.value,
    )
    await RealtimeFanout(broadcaster).user_notification(notification)
    return notification


@router.put(
    "/read-all",
    response_model=NotificationCountResponse,
    summary="Mark all my notifications as read",
    responses={401: {"description": "Unauthorized"}},
)
async def mark_all_as_read(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationCountResponse:
    repo = UserNotificationRepository(db)
    return NotificationCountResponse(count=repo.mark_all_as_read(user.id))  # type: ignore[arg-type]


@router.delete(
    "/all",
    response_model=NotificationMessageResponse,
    summary="Delete all my notifications",
    responses={401: {"description": "Unauthorized"}},
)
async def delete_all_notifications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationMessageResponse:
    repo = UserNotificationRepository(db)
    repo.delete_all(user.id)  # type: ignore[arg-type]
    return NotificationMessageResponse(message="All notifications deleted")


@router.get(
    "/{notification_id}",
    response_model=UserNotificationResponse,
    summary="Get one of my notifications",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Notification not found"},
    },
)
async def get_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserNotification:
    repo = UserNotificationRepository(db)
    notification = repo.get_by_id(notification_id, user.id)  # type: ignore[arg-type]
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.put(
    "/{notification_id}/read",
    response_model=UserNotificationResponse,
    summary="Mark one of my notifications as read",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Notification not found"},
    },
)
async def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserNotification:
    repo = UserNotificationRepository(db)
    notification = repo.get_by_id(notification_id, user.id)  # type: ignore[arg-type]
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return repo.mark_as_read(notification)


@router.delete(
    "/{notification_id}",
    response_model=NotificationMessageResponse,
    summary="Delete one of my notifications",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Notification not found"},
    },
)
async def delete_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationMessageResponse:
    repo = UserNotificationRepository(db)
    notification = repo.get_by_id(notification_id, user.id)  # type: ignore[arg-type]
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    repo.delete(notification)
    return NotificationMessageResponse(message="Notification removed")
