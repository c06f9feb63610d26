"""Booking schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.booking import BookingStatus
from app.schemas.shipment import ShipmentResponse
from app.schemas.user import UserSummary


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shipment_id: UUID = Field(alias="shipmentId")


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class ShipmentSnapshot(BaseModel):
    """Shipment fields frozen into a booking when it is created."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    vehicle_type: str
    load: str
    weight: Decimal
    price: Decimal
    status: str
    image: str = ""
    vehicle_number: str = ""

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str | None = None
    shipment_id: UUID
    user_id: UUID
    user_name: str
    status: str
    booked_at: datetime
    shipment_details: ShipmentSnapshot
    created_at: datetime
    updated_at: datetime
    shipment: ShipmentResponse | None = None
    user: UserSummary | None = None


class BookingDeleteResponse(BaseModel):
    message: str
