"""Column types and mixins shared by the models."""

import uuid
from typing import Any

from sqlalchemy import Column, DateTime, String, TypeDecorator, func
from sqlalchemy.engine import Dialect


class UUIDType(TypeDecorator[uuid.UUID]):
    """UUID stored as its 36 character string form on every backend.

    Accepts UUID instances or their string form on the way in, so ids taken
    straight from a path parameter or a JSON body can be bound unchanged.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))

    def process_result_value(self, value: Any, dialect: Dialect) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


class TimestampMixin:
    """``created_at`` / ``updated_at`` maintained by the database."""

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
