"""Shipment read endpoints and derived booking availability."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import require_admin
from app.core.database import get_db
from app.models.shipment import Shipment
from app.models.user import User
from app.repositories.shipment_repository import ShipmentRepository
from app.schemas.shipment import ShipmentBookingStatus, ShipmentCreate, ShipmentResponse
from app.services.booking_service import BookingError, BookingService
from app.services.realtime import Broadcaster, RealtimeFanout, get_broadcaster

router = APIRouter()


@router.post(
    "/",
    response_model=ShipmentResponse,
    status_code=201,
    summary="Publish shipment",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Admin only"},
    },
)
async def create_shipment(
    data: ShipmentCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Shipment:
    """Publish a shipment and assign it the next SH code."""
    repo = ShipmentRepository(db)
    return repo.create(data, created_by=admin.id)  # type: ignore[arg-type]


@router.get(
    "/available",
    response_model=list[ShipmentResponse],
    summary="List bookable shipments",
)
async def list_available_shipments(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[Shipment]:
    """Open shipments without an active booking."""
    repo = ShipmentRepository(db)
    return repo.get_available(skip=skip, limit=limit)


@router.get(
    "/{shipment_id}",
    response_model=ShipmentResponse,
    summary="Get shipment",
    responses={404: {"description": "Shipment not found"}},
)
async def get_shipment(
    shipment_id: UUID,
    db: Session = Depends(get_db),
) -> Shipment:
    repo = ShipmentRepository(db)
    shipment = repo.get_by_id(shipment_id)
    if not shipment:
        raise HTTPException(status_code=404, detail="Shipment not found")
    return shipment


@router.get(
    "/{shipment_id}/booking_status",
    response_model=ShipmentBookingStatus,
    response_model_by_alias=True,
    summary="Get shipment booking status",
    responses={404: {"description": "Shipment not found"}},
)
async def get_shipment_booking_status(
    shipment_id: UUID,
    db: Session = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> ShipmentBookingStatus:
    """Same payload as the ``shipment-booking-status`` realtime event."""
    service = BookingService(db, RealtimeFanout(broadcaster))
    try:
        return service.shipment_booking_status(shipment_id)
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e
