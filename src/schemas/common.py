"""Shared schema types."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, PlainSerializer


def to_epoch_ms(value: datetime) -> int:
    """Serialize a datetime as epoch milliseconds (naive values are UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


# Datetime on the Python side, epoch milliseconds on the wire
EpochMillis = Annotated[datetime, PlainSerializer(to_epoch_ms, return_type=int, when_used="json")]


class UserSummary(BaseModel):
    """Public user fields embedded in other responses."""

    id: int
    name: str | None = None
    username: str | None = None
    image: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True
