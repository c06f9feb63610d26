"""Booking model for carrier claims on shipments."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, func, text

from app.core.database import Base
from app.models.shared import TimestampMixin, UUIDType, generate_uuid


class BookingStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)

# Predicate shared by the partial unique indexes and the migration
ACTIVE_BOOKING_PREDICATE = "status IN ('Pending', 'Approved')"

# Index names double as the conflict namespaces reported by the repository
ACTIVE_SHIPMENT_INDEX = "uq_bookings_active_shipment"
ACTIVE_USER_SHIPMENT_INDEX = "uq_bookings_active_user_shipment"
CODE_INDEX = "uq_bookings_code"


class Booking(TimestampMixin, Base):
    """Booking model - one carrier's claim on one shipment.

    ``shipment_details`` is a snapshot of the shipment taken at booking time so
    the booking history survives later shipment edits or deletion.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            ACTIVE_SHIPMENT_INDEX,
            "shipment_id",
            unique=True,
            sqlite_where=text(ACTIVE_BOOKING_PREDICATE),
            postgresql_where=text(ACTIVE_BOOKING_PREDICATE),
        ),
        Index(
            ACTIVE_USER_SHIPMENT_INDEX,
            "user_id",
            "shipment_id",
            unique=True,
            sqlite_where=text(ACTIVE_BOOKING_PREDICATE),
            postgresql_where=text(ACTIVE_BOOKING_PREDICATE),
        ),
        Index(CODE_INDEX, "code", unique=True),
        Index("ix_bookings_user_id", "user_id"),
        Index("ix_bookings_status", "status"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(20), nullable=True)
    shipment_id = Column(
        UUIDType,
        ForeignKey("shipments.id", ondelete="RESTRICT"),
        nullable=False,
    )
    user_id = Column(
        UUIDType,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    user_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    booked_at = Column(DateTime(timezone=True), server_default=func.now())
    shipment_details = Column(JSON, nullable=False, default=dict)
