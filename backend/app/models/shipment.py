"""Shipment model for admin-published loads."""

from enum import Enum

from sqlalchemy import Column, Date, ForeignKey, Numeric, String

from app.core.database import Base
from app.models.shared import TimestampMixin, UUIDType, generate_uuid


class ShipmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    PENDING = "Pending"
    IN_TRANSIT = "InTransit"
    AT_WAREHOUSE = "AtWarehouse"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Shipments in these states can no longer be booked
CLOSED_SHIPMENT_STATUSES = (ShipmentStatus.DELIVERED.value, ShipmentStatus.CANCELLED.value)


class Shipment(TimestampMixin, Base):
    """Shipment model - a load published by an admin for carriers to book."""

    __tablename__ = "shipments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(20), unique=True, index=True, nullable=True)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    vehicle_type = Column(String(100), nullable=False)
    load = Column(String(100), nullable=False)
    weight = Column(Numeric(12, 2), nullable=False)
    pickup_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default=ShipmentStatus.PENDING.value, index=True)
    eta = Column(String(100), nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False, default=0)
    driver_vehicle_number = Column(String(50), nullable=True)
    image = Column(String(2048), nullable=False, default="")
    created_by = Column(
        UUIDType,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
