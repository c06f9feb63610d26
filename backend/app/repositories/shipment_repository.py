"""Shipment repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking
from app.models.shipment import CLOSED_SHIPMENT_STATUSES, Shipment, ShipmentStatus
from app.schemas.shipment import ShipmentCreate
from app.services.code_generator import SHIPMENT_PREFIX, ShipmentCodeGenerator


class ShipmentRepository:
    """Repository for Shipment model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, shipment_id: UUID) -> Shipment | None:
        return self.db.query(Shipment).filter(Shipment.id == shipment_id).first()

    def get_by_code(self, code: str) -> Shipment | None:
        return self.db.query(Shipment).filter(Shipment.code == code).first()

    def get_available(self, skip: int = 0, limit: int = 100) -> list[Shipment]:
        """Shipments that are still open and have no active booking."""
        active = self.db.query(Booking.shipment_id).filter(
            Booking.status.in_(ACTIVE_BOOKING_STATUSES)
        )
        return (
            self.db.query(Shipment)
            .filter(
                Shipment.status.notin_(CLOSED_SHIPMENT_STATUSES),
                Shipment.id.notin_(active),
            )
            .order_by(Shipment.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def existing_codes(self) -> list[str]:
        rows = (
            self.db.query(Shipment.code)
            .filter(Shipment.code.like(f"{SHIPMENT_PREFIX}%"))
            .all()
        )
        return [row[0] for row in rows]

    def code_exists(self, code: str) -> bool:
        return self.db.query(Shipment.id).filter(Shipment.code == code).first() is not None

    def create(self, data: ShipmentCreate, created_by: UUID | None = None) -> Shipment:
        """Create a shipment and assign it the next ``SH##`` code."""
        generator = ShipmentCodeGenerator(self.existing_codes, self.code_exists)
        shipment = Shipment(
            code=generator.generate(),
            origin=data.origin,
            destination=data.destination,
            vehicle_type=data.vehicle_type,
            load=data.load,
            weight=data.weight,
            pickup_date=data.pickup_date,
            status=data.status.value,
            eta=data.eta,
            price=data.price,
            driver_vehicle_number=data.driver_vehicle_number,
            image=data.image,
            created_by=created_by,
        )
        self.db.add(shipment)
        self.db.commit()
        self.db.refresh(shipment)
        return shipment

    def set_status(self, shipment_id: UUID, status: ShipmentStatus) -> Shipment | None:
        shipment = self.get_by_id(shipment_id)
        if not shipment:
            return None
        shipment.status = status.value  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(shipment)
        return shipment
