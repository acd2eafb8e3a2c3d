"""Notification schemas."""

from pydantic import BaseModel

from src.schemas.common import EpochMillis, UserSummary


class NotificationRecipe(BaseModel):
    title: str
    slug: str


class NotificationResponse(BaseModel):
    """A notification with its actor and recipe resolved."""

    id: int
    type: str
    read: bool
    recipe_id: int | None
    created_at: EpochMillis
    actor: UserSummary | None
    recipe: NotificationRecipe | None


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
