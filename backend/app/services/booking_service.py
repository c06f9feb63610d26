"""Booking admission and lifecycle service.

Admission is optimistic: a quick read rejects obvious duplicates with a good
message, but the partial unique indexes on ``bookings`` decide every race.
When the store reports a conflict the winner is looked up again, so the error
the caller sees always reflects current state rather than the pre-check.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.auth import is_admin
from app.core.config import settings
from app.models.booking import Booking, BookingStatus
from app.models.notification import RelatedModel
from app.models.shipment import CLOSED_SHIPMENT_STATUSES, Shipment, ShipmentStatus
from app.models.user import User
from app.repositories.booking_repository import (
    BookingConflict,
    BookingRepository,
    CodeConflict,
    UserShipmentConflict,
)
from app.repositories.shipment_repository import ShipmentRepository
from app.repositories.user_repository import UserRepository
from app.schemas.booking import BookingResponse, ShipmentSnapshot
from app.schemas.shipment import ShipmentBookingStatus, ShipmentResponse
from app.schemas.user import UserSummary
from app.services.code_generator import BookingCodeGenerator, fallback_booking_code
from app.services.notification_service import (
    EVENT_BOOKING_CANCELLED,
    EVENT_BOOKING_CANCELLED_BY_USER,
    EVENT_BOOKING_REQUEST_SENT,
    EVENT_BOOKING_REQUESTED,
    NotificationDispatcher,
    NotificationKind,
    event_for_status,
)
from app.services.realtime import RealtimeFanout

logger = logging.getLogger(__name__)


class BookingErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    SHIPMENT_UNAVAILABLE = "SHIPMENT_UNAVAILABLE"
    DUPLICATE_USER_BOOKING = "DUPLICATE_USER_BOOKING"
    DUPLICATE_BOOKING = "DUPLICATE_BOOKING"
    BOOKING_ID_CONFLICT = "BOOKING_ID_CONFLICT"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"


class BookingError(Exception):
    """A booking request that cannot be honoured, with a stable error code."""

    def __init__(
        self,
        code: BookingErrorCode,
        message: str,
        status_code: int = 400,
        **extra: Any,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.extra = extra

    def to_detail(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message, **self.extra}


class AdmissionState(str, Enum):
    ATTEMPT = "attempt"
    RECLASSIFY = "reclassify"
    RESPOND = "respond"


# Terminal states have no outgoing transitions
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
    ),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
}


def booking_display_id(booking: Booking) -> str:
    if booking.code:
        return str(booking.code)
    return str(booking.id).replace("-", "")[-6:].upper()


class BookingService:
    """Service for booking admission, status changes and deletion."""

    def __init__(
        self,
        db: Session,
        fanout: RealtimeFanout,
        dispatcher: NotificationDispatcher | None = None,
        code_max_attempts: int | None = None,
    ):
        self.db = db
        self.fanout = fanout
        self.dispatcher = dispatcher or NotificationDispatcher(db, fanout)
        self.booking_repo = BookingRepository(db)
        self.shipment_repo = ShipmentRepository(db)
        self.user_repo = UserRepository(db)
        self.code_max_attempts = code_max_attempts or settings.BOOKING_CODE_MAX_ATTEMPTS
        self.code_generator = BookingCodeGenerator(
            self.booking_repo.count_codes_with_prefix,
            self.booking_repo.code_exists,
            max_attempts=self.code_max_attempts,
        )

    # ── Admission ─────────────────────────────────────────────────

    async def create_booking(self, shipment_id: UUID, user: User) -> BookingResponse:
        """Book ``shipment_id`` for ``user``.

        Raises:
            BookingError: NOT_FOUND, SHIPMENT_UNAVAILABLE, DUPLICATE_USER_BOOKING,
                DUPLICATE_BOOKING or BOOKING_ID_CONFLICT.
        """
        shipment = self.shipment_repo.get_by_id(shipment_id)
        if not shipment:
            raise BookingError(
                BookingErrorCode.NOT_FOUND,
                f"Shipment not found with ID: {shipment_id}",
                status_code=404,
            )
        if shipment.status in CLOSED_SHIPMENT_STATUSES:
            raise BookingError(
                BookingErrorCode.SHIPMENT_UNAVAILABLE,
                "Shipment is not available for booking",
            )

        self._precheck(shipment, user)
        booking = self._admit(shipment, user)
        logger.info("Booking %s admitted for shipment %s", booking.code, shipment.id)

        response = self.populate(booking)
        await self._announce_created(booking, shipment, user, response)
        return response

    def _precheck(self, shipment: Shipment, user: User) -> None:
        """Fast-path duplicate detection; the unique indexes remain authoritative."""
        if self.booking_repo.get_active_for_user_and_shipment(user.id, shipment.id):  # type: ignore[arg-type]
            raise self._duplicate_for_self()
        existing = self.booking_repo.get_active_for_shipment(shipment.id)  # type: ignore[arg-type]
        if existing:
            raise self._duplicate_for_other(existing)

    def _admit(self, shipment: Shipment, user: User) -> Booking:
        """Run Attempt -> (Reclassify | Respond) until the request is decided."""
        snapshot = self.snapshot(shipment, user).to_json()
        code: str | None = self.code_generator.generate(str(user.name))
        state = AdmissionState.ATTEMPT
        booking: Booking | None = None

        while True:
            if state == AdmissionState.ATTEMPT:
                outcome = self.booking_repo.insert_pending(
                    shipment_id=shipment.id,  # type: ignore[arg-type]
                    user_id=user.id,  # type: ignore[arg-type]
                    user_name=str(user.name),
                    shipment_details=snapshot,
                    code=code,
                )
                if isinstance(outcome, Booking):
                    booking = outcome
                    state = AdmissionState.RESPOND
                elif isinstance(outcome, CodeConflict) and code is not None:
                    # Only the code lost; the booking itself was never written
                    logger.info("Booking code %s already taken, inserting without code", code)
                    code = None
                else:
                    logger.info(
                        "Admission conflict (%s) for shipment %s by user %s",
                        outcome.namespace,
                        shipment.id,
                        user.id,
                    )
                    state = AdmissionState.RECLASSIFY
            elif state == AdmissionState.RECLASSIFY:
                raise self._reclassify(shipment, user, outcome)
            else:
                return self._ensure_code(booking, str(user.name))  # type: ignore[arg-type]

    def _reclassify(
        self, shipment: Shipment, user: User, conflict: BookingConflict
    ) -> BookingError:
        """Look up the winning booking and build the matching duplicate error."""
        winner = self.booking_repo.get_active_for_shipment(shipment.id)  # type: ignore[arg-type]
        if winner is not None and winner.user_id == user.id:
            return self._duplicate_for_self()
        if winner is None and isinstance(conflict, UserShipmentConflict):
            # The caller's own booking won and has since left the active set
            return self._duplicate_for_self()
        return self._duplicate_for_other(winner)

    def _ensure_code(self, booking: Booking, seed: str) -> Booking:
        """Assign a code to a booking persisted without one.

        Only the code assignment is retried here; a code collision says nothing
        about whether the booking itself is a duplicate.
        """
        offset = 0
        for _ in range(self.code_max_attempts):
            if booking.code:
                return booking
            result = self.booking_repo.assign_code(
                booking, self.code_generator.generate(seed, offset=offset)
            )
            if isinstance(result, BookingConflict):
                logger.info("Code assignment for booking %s collided, retrying", booking.id)
                offset += 1
                continue
            booking = result

        if booking.code:
            return booking
        result = self.booking_repo.assign_code(booking, fallback_booking_code(seed))
        if isinstance(result, BookingConflict):
            logger.warning("Could not assign a code to booking %s, releasing it", booking.id)
            self.booking_repo.delete(booking)
            raise BookingError(
                BookingErrorCode.BOOKING_ID_CONFLICT,
                "Booking ID conflict. Please try again.",
            )
        return result

    @staticmethod
    def _duplicate_for_self() -> BookingError:
        return BookingError(
            BookingErrorCode.DUPLICATE_USER_BOOKING,
            "You already have a booking for this shipment",
        )

    @staticmethod
    def _duplicate_for_other(winner: Booking | None) -> BookingError:
        return BookingError(
            BookingErrorCode.DUPLICATE_BOOKING,
            "This shipment is already booked by another user",
            booked_by=winner.user_name if winner is not None else None,
        )

    @staticmethod
    def snapshot(shipment: Shipment, user: User) -> ShipmentSnapshot:
        return ShipmentSnapshot(
            origin=shipment.origin,
            destination=shipment.destination,
            vehicle_type=shipment.vehicle_type,
            load=shipment.load,
            weight=shipment.weight,
            price=shipment.price,
            status=shipment.status,
            image=shipment.image or "",
            vehicle_number=user.vehicle_number or shipment.driver_vehicle_number or "",
        )

    async def _announce_created(
        self,
        booking: Booking,
        shipment: Shipment,
        user: User,
        response: BookingResponse,
    ) -> None:
        params = {
            "userName": user.name,
            "phone": user.phone or "No phone",
            "origin": shipment.origin,
            "destination": shipment.destination,
            "bookingId": booking_display_id(booking),
        }
        await self._notify(NotificationKind.ADMIN, EVENT_BOOKING_REQUESTED, params, booking)
        user_params = {k: params[k] for k in ("origin", "destination", "bookingId")}
        await self._notify(
            NotificationKind.USER,
            EVENT_BOOKING_REQUEST_SENT,
            user_params,
            booking,
            user_id=user.id,  # type: ignore[arg-type]
        )
        await self.fanout.shipment_booking_status(
            shipment.id,  # type: ignore[arg-type]
            is_booked=True,
            booked_by=str(user.name),
            booking_status=BookingStatus.PENDING.value,
        )
        await self.fanout.booking_update(response)

    # ── Lifecycle ─────────────────────────────────────────────────

    async def update_status(
        self, booking_id: UUID, status: BookingStatus, actor: User
    ) -> BookingResponse:
        """Apply an admin decision to a booking."""
        booking = self._get_or_404(booking_id)
        booking = self._transition(booking, status)
        logger.info("Booking %s set to %s by %s", booking.id, status.value, actor.id)

        if status == BookingStatus.APPROVED:
            self.shipment_repo.set_status(
                booking.shipment_id,  # type: ignore[arg-type]
                ShipmentStatus.IN_TRANSIT,
            )

        response = self.populate(booking)
        await self._announce_status(booking, status, response)
        await self._notify(
            NotificationKind.USER,
            event_for_status(status),
            self._status_params(booking, status),
            booking,
            user_id=booking.user_id,  # type: ignore[arg-type]
        )
        return response

    async def cancel_booking(self, booking_id: UUID, actor: User) -> BookingResponse:
        """Cancel a booking on behalf of its owner or an admin."""
        booking = self._get_or_404(booking_id)
        self._check_access(booking, actor)
        booking = self._transition(booking, BookingStatus.CANCELLED)

        response = self.populate(booking)
        await self._announce_status(booking, BookingStatus.CANCELLED, response)
        params = self._status_params(booking, BookingStatus.CANCELLED)
        if is_admin(actor):
            await self._notify(
                NotificationKind.USER,
                EVENT_BOOKING_CANCELLED,
                params,
                booking,
                user_id=booking.user_id,  # type: ignore[arg-type]
            )
        else:
            params["userName"] = booking.user_name
            await self._notify(
                NotificationKind.ADMIN, EVENT_BOOKING_CANCELLED_BY_USER, params, booking
            )
        return response

    async def delete_booking(self, booking_id: UUID, actor: User) -> None:
        """Delete a booking and re-announce the shipment if it is free again."""
        booking = self._get_or_404(booking_id)
        self._check_access(booking, actor)

        shipment_id = booking.shipment_id
        self.booking_repo.delete(booking)
        logger.info("Booking %s deleted by %s", booking_id, actor.id)

        if not self.booking_repo.has_active_for_shipment(shipment_id):  # type: ignore[arg-type]
            await self.fanout.shipment_booking_status(
                shipment_id,  # type: ignore[arg-type]
                is_booked=False,
            )

    def _transition(self, booking: Booking, status: BookingStatus) -> Booking:
        current = BookingStatus(booking.status)
        if status not in ALLOWED_TRANSITIONS.get(current, frozenset()):
            raise BookingError(
                BookingErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot change booking status from {current.value} to {status.value}",
            )
        updated = self.booking_repo.transition_status(booking, current, status)
        if updated is None:
            raise BookingError(
                BookingErrorCode.INVALID_STATUS_TRANSITION,
                "Booking status changed concurrently, please reload",
            )
        return updated

    async def _announce_status(
        self, booking: Booking, status: BookingStatus, response: BookingResponse
    ) -> None:
        await self.fanout.booking_update(response)
        # Availability follows the store, so a Completed booking frees the shipment too
        active = self.booking_repo.get_active_for_shipment(booking.shipment_id)  # type: ignore[arg-type]
        if active is None:
            await self.fanout.shipment_booking_status(
                booking.shipment_id,  # type: ignore[arg-type]
                is_booked=False,
            )
        else:
            await self.fanout.shipment_booking_status(
                booking.shipment_id,  # type: ignore[arg-type]
                is_booked=True,
                booked_by=str(active.user_name),
                booking_status=BookingStatus(active.status).value,
            )

    @staticmethod
    def _status_params(booking: Booking, status: BookingStatus) -> dict[str, Any]:
        details = booking.shipment_details or {}
        return {
            "origin": details.get("origin", "N/A"),
            "destination": details.get("destination", "N/A"),
            "bookingId": booking_display_id(booking),
            "status": status.value.lower(),
        }

    async def _notify(
        self,
        kind: NotificationKind,
        event: str,
        params: dict[str, Any],
        booking: Booking,
        user_id: UUID | None = None,
    ) -> None:
        """Create a notification without letting a failure reach the caller."""
        try:
            await self.dispatcher.notify(
                kind,
                event,
                params,
                user_id=user_id,
                related_id=booking.id,  # type: ignore[arg-type]
                related_model=RelatedModel.BOOKING,
            )
        except Exception:
            logger.exception("Failed to create %s notification for booking %s", event, booking.id)

    # ── Queries ───────────────────────────────────────────────────

    def list_bookings(
        self,
        actor: User,
        user_id: UUID | None = None,
        status: BookingStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[BookingResponse]:
        """Admins see every booking, users only their own."""
        if not is_admin(actor):
            user_id = actor.id  # type: ignore[assignment]
        bookings = self.booking_repo.get_all(user_id=user_id, status=status, skip=skip, limit=limit)
        return [self.populate(b) for b in bookings]

    def get_booking(self, booking_id: UUID, actor: User) -> BookingResponse:
        booking = self._get_or_404(booking_id)
        self._check_access(booking, actor)
        return self.populate(booking)

    def shipment_booking_status(self, shipment_id: UUID) -> ShipmentBookingStatus:
        """Derive a shipment's availability from its active booking, if any."""
        if not self.shipment_repo.get_by_id(shipment_id):
            raise BookingError(
                BookingErrorCode.NOT_FOUND,
                f"Shipment not found with ID: {shipment_id}",
                status_code=404,
            )
        active = self.booking_repo.get_active_for_shipment(shipment_id)
        if active is None:
            return ShipmentBookingStatus(shipment_id=shipment_id, is_booked=False)
        return ShipmentBookingStatus(
            shipment_id=shipment_id,
            is_booked=True,
            booked_by=active.user_name,
            booking_status=active.status,
        )

    def populate(self, booking: Booking) -> BookingResponse:
        """Resolve the shipment and user a booking references."""
        shipment = self.shipment_repo.get_by_id(booking.shipment_id)  # type: ignore[arg-type]
        user = self.user_repo.get_by_id(booking.user_id)  # type: ignore[arg-type]
        return BookingResponse.model_validate(booking).model_copy(
            update={
                "shipment": ShipmentResponse.model_validate(shipment) if shipment else None,
                "user": UserSummary.model_validate(user) if user else None,
            }
        )

    def _get_or_404(self, booking_id: UUID) -> Booking:
        booking = self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise BookingError(BookingErrorCode.NOT_FOUND, "Booking not found", status_code=404)
        return booking

    @staticmethod
    def _check_access(booking: Booking, actor: User) -> None:
        if not is_admin(actor) and booking.user_id != actor.id:
            raise BookingError(BookingErrorCode.FORBIDDEN, "Not authorized", status_code=403)
