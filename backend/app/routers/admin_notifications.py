"""Admin notification API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import require_admin
from app.core.database import get_db
from app.models.notification import AdminNotification, AdminNotificationCategory
from app.models.user import User
from app.repositories.notification_repository import AdminNotificationRepository
from app.schemas.notification import (
    NotificationCountResponse,
    NotificationMessageResponse,
    NotificationResponse,
)

router = APIRouter()

_RESPONSES = {
    401: {"description": "Unauthorized"},
    403: {"description": "Admin only"},
}


@router.get(
    "/unread/count",
    response_model=NotificationCountResponse,
    summary="Get unread admin notification count",
    responses=_RESPONSES,
)
async def get_unread_count(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> NotificationCountResponse:
    repo = AdminNotificationRepository(db)
    return NotificationCountResponse(count=repo.count_unread())


@router.get(
    "/",
    response_model=list[NotificationResponse],
    summary="List admin notifications",
    responses=_RESPONSES,
)
async def list_notifications(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    type: AdminNotificationCategory | None = None,
    read: bool | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> list[AdminNotification]:
    """List admin notifications, newest first."""
    repo = AdminNotificationRepository(db)
    return repo.get_all(
        skip=skip,
        limit=limit,
        type=type.value if type else None,
        read=read,
    )


@router.put(
    "/read-all",
    response_model=NotificationCountResponse,
    summary="Mark all admin notifications as read",
    responses=_RESPONSES,
)
async def mark_all_as_read(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> NotificationCountResponse:
    """Returns the number of notifications that were marked."""
    repo = AdminNotificationRepository(db)
    return NotificationCountResponse(count=repo.mark_all_as_read())


@router.delete(
    "/all",
    response_model=NotificationMessageResponse,
    summary="Delete all admin notifications",
    responses=_RESPONSES,
)
async def delete_all_notifications(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> NotificationMessageResponse:
    repo = AdminNotificationRepository(db)
    repo.delete_all()
    return NotificationMessageResponse(message="All notifications deleted")


@router.get(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Get admin notification",
    responses={**_RESPONSES, 404: {"description": "Notification not found"}},
)
async def get_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminNotification:
    repo = AdminNotificationRepository(db)
    notification = repo.get_by_id(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark an admin notification as read",
    responses={**_RESPONSES, 404: {"description": "Notification not found"}},
)
async def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminNotification:
    repo = AdminNotificationRepository(db)
    notification = repo.get_by_id(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return repo.mark_as_read(notification)


@router.delete(
    "/{notification_id}",
    response_model=NotificationMessageResponse,
    summary="Delete an admin notification",
    responses={**_RESPONSES, 404: {"description": "Notification not found"}},
)
async def delete_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> NotificationMessageResponse:
    repo = AdminNotificationRepository(db)
    notification = repo.get_by_id(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    repo.delete(notification)
    return NotificationMessageResponse(message="Notification removed")
