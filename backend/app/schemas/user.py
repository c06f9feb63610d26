"""User schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """The user fields embedded in a populated booking."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str | None = None
    vehicle_number: str | None = None
