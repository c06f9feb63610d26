"""Booking API endpoints."""

from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, require_admin
from app.core.database import get_db
from app.models.booking import BookingStatus
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingDeleteResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.services.booking_service import BookingError, BookingService
from app.services.realtime import Broadcaster, RealtimeFanout, get_broadcaster

router = APIRouter()


def get_booking_service(
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> BookingService:
    return BookingService(db, RealtimeFanout(broadcaster))


def _raise_http(exc: BookingError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=201,
    summary="Book a shipment",
    responses={
        400: {
            "description": (
                "DUPLICATE_USER_BOOKING, DUPLICATE_BOOKING, BOOKING_ID_CONFLICT, "
                "SHIPMENT_UNAVAILABLE or VALIDATION_ERROR"
            )
        },
        401: {"description": "Unauthorized"},
        404: {"description": "Shipment not found"},
    },
)
async def create_booking(
    data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    """Claim a shipment. The first active booking wins."""
    try:
        return await service.create_booking(data.shipment_id, user)
    except BookingError as e:
        _raise_http(e)


@router.get(
    "/",
    response_model=list[BookingResponse],
    summary="List bookings",
    responses={401: {"description": "Unauthorized"}},
)
async def list_bookings(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    user_id: UUID | None = None,
    status: BookingStatus | None = None,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> list[BookingResponse]:
    """List bookings. Non-admin users only ever see their own."""
    return service.list_bookings(user, user_id=user_id, status=status, skip=skip, limit=limit)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Not the booking owner"},
        404: {"description": "Booking not found"},
    },
)
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        return service.get_booking(booking_id, user)
    except BookingError as e:
        _raise_http(e)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update booking status",
    responses={
        400: {"description": "Invalid status transition"},
        401: {"description": "Unauthorized"},
        403: {"description": "Admin only"},
        404: {"description": "Booking not found"},
    },
)
async def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
    admin: User = Depends(require_admin),
) -> BookingResponse:
    """Approve, reject, complete or cancel a booking."""
    try:
        return await service.update_status(booking_id, data.status, admin)
    except BookingError as e:
        _raise_http(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel booking",
    responses={
        400: {"description": "Booking is no longer active"},
        401: {"description": "Unauthorized"},
        403: {"description": "Not the booking owner"},
        404: {"description": "Booking not found"},
    },
)
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingResponse:
    try:
        return await service.cancel_booking(booking_id, user)
    except BookingError as e:
        _raise_http(e)


@router.delete(
    "/{booking_id}",
    response_model=BookingDeleteResponse,
    summary="Delete booking",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Not the booking owner"},
        404: {"description": "Booking not found"},
    },
)
async def delete_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: User = Depends(get_current_user),
) -> BookingDeleteResponse:
    try:
        await service.delete_booking(booking_id, user)
    except BookingError as e:
        _raise_http(e)
    return BookingDeleteResponse(message="Booking removed")
