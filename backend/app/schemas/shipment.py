"""Shipment schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.shipment import ShipmentStatus


class ShipmentCreate(BaseModel):
    origin: str = Field(min_length=1, max_length=255)
    destination: str = Field(min_length=1, max_length=255)
    vehicle_type: str = Field(min_length=1, max_length=100)
    load: str = Field(min_length=1, max_length=100)
    weight: Decimal = Field(ge=0)
    pickup_date: date | None = None
    status: ShipmentStatus = ShipmentStatus.PENDING
    eta: str = ""
    price: Decimal = Field(default=Decimal(0), ge=0)
    driver_vehicle_number: str | None = None
    image: str = ""


class ShipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str | None = None
    origin: str
    destination: str
    vehicle_type: str
    load: str
    weight: Decimal
    pickup_date: date | None = None
    status: str
    eta: str
    price: Decimal
    driver_vehicle_number: str | None = None
    image: str
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class ShipmentBookingStatus(BaseModel):
    """Derived availability of a shipment, as pushed on the realtime channel."""

    model_config = ConfigDict(populate_by_name=True)

    shipment_id: UUID = Field(alias="shipmentId")
    is_booked: bool = Field(alias="isBooked")
    booked_by: str | None = Field(default=None, alias="bookedBy")
    booking_status: str | None = Field(default=None, alias="bookingStatus")
