"""Booking repository for data access.

Writes that can trip one of the booking unique indexes return a typed conflict
instead of raising, so callers can tell "the shipment is taken" apart from
"the code is taken" without looking at driver exceptions themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.booking import (
    ACTIVE_BOOKING_STATUSES,
    ACTIVE_SHIPMENT_INDEX,
    ACTIVE_USER_SHIPMENT_INDEX,
    CODE_INDEX,
    Booking,
    BookingStatus,
)


@dataclass(frozen=True)
class BookingConflict:
    """A unique index rejected a booking write."""

    namespace = "unknown"

    detail: str


@dataclass(frozen=True)
class ShipmentActivityConflict(BookingConflict):
    """Another active booking already holds the shipment."""

    namespace = "shipment_activity"


@dataclass(frozen=True)
class UserShipmentConflict(BookingConflict):
    """The same user already holds an active booking for the shipment."""

    namespace = "user_shipment"


@dataclass(frozen=True)
class CodeConflict(BookingConflict):
    """The booking code is already in use."""

    namespace = "code"


# SQLite reports the indexed columns, PostgreSQL the index name
_CONFLICT_SIGNATURES: tuple[tuple[type[BookingConflict], tuple[str, ...]], ...] = (
    (UserShipmentConflict, (ACTIVE_USER_SHIPMENT_INDEX, "bookings.user_id, bookings.shipment_id")),
    (ShipmentActivityConflict, (ACTIVE_SHIPMENT_INDEX, "bookings.shipment_id")),
    (CodeConflict, (CODE_INDEX, "bookings.code")),
)


def classify_integrity_error(exc: IntegrityError) -> BookingConflict | None:
    """Map a unique violation on ``bookings`` to its conflict namespace."""
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    message = constraint_name or str(exc.orig)
    for conflict_cls, signatures in _CONFLICT_SIGNATURES:
        if any(signature in message for signature in signatures):
            return conflict_cls(detail=str(exc.orig))
    return None


class BookingRepository:
    """Repository for Booking model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, booking_id: UUID) -> Booking | None:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_all(
        self,
        user_id: UUID | None = None,
        status: BookingStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Booking]:
        query = self.db.query(Booking)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if status is not None:
            query = query.filter(Booking.status == status.value)
        return query.order_by(Booking.created_at.desc()).offset(skip).limit(limit).all()

    def get_active_for_shipment(self, shipment_id: UUID) -> Booking | None:
        return (
            self.db.query(Booking)
            .filter(
                Booking.shipment_id == shipment_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .first()
        )

    def get_active_for_user_and_shipment(self, user_id: UUID, shipment_id: UUID) -> Booking | None:
        return (
            self.db.query(Booking)
            .filter(
                Booking.user_id == user_id,
                Booking.shipment_id == shipment_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .first()
        )

    def count_codes_with_prefix(self, prefix: str) -> int:
        return self.db.query(Booking).filter(Booking.code.like(f"{prefix}%")).count()

    def code_exists(self, code: str) -> bool:
        return self.db.query(Booking.id).filter(Booking.code == code).first() is not None

    def insert_pending(
        self,
        *,
        shipment_id: UUID,
        user_id: UUID,
        user_name: str,
        shipment_details: dict[str, Any],
        code: str | None = None,
    ) -> Booking | BookingConflict:
        """Insert a Pending booking.

        Returns the persisted booking, or the conflict reported by the unique
        indexes. Any other integrity failure is re-raised.
        """
        booking = Booking(
            code=code,
            shipment_id=shipment_id,
            user_id=user_id,
            user_name=user_name,
            status=BookingStatus.PENDING.value,
            shipment_details=shipment_details,
        )
        self.db.add(booking)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            conflict = classify_integrity_error(exc)
            if conflict is None:
                raise
            return conflict
        self.db.refresh(booking)
        return booking

    def assign_code(self, booking: Booking, code: str) -> Booking | BookingConflict:
        """Set the code of a booking that has none yet.

        The update only matches rows whose code is still NULL, so a code that
        was already assigned is never replaced.
        """
        try:
            self.db.query(Booking).filter(
                Booking.id == booking.id,
                Booking.code.is_(None),
            ).update({"code": code}, synchronize_session=False)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            conflict = classify_integrity_error(exc)
            if conflict is None:
                raise
            return conflict
        self.db.refresh(booking)
        return booking

    def transition_status(
        self,
        booking: Booking,
        from_status: BookingStatus,
        to_status: BookingStatus,
    ) -> Booking | None:
        """Move a booking from ``from_status`` to ``to_status``.

        Returns None when the stored status no longer is ``from_status``.
        """
        updated = (
            self.db.query(Booking)
            .filter(Booking.id == booking.id, Booking.status == from_status.value)
            .update({"status": to_status.value}, synchronize_session=False)
        )
        self.db.commit()
        if not updated:
            return None
        self.db.refresh(booking)
        return booking

    def has_active_for_shipment(self, shipment_id: UUID) -> bool:
        return self.get_active_for_shipment(shipment_id) is not None

    def delete(self, booking: Booking) -> None:
        self.db.delete(booking)
        self.db.commit()
