"""Presence schemas."""

from pydantic import BaseModel


class CookingUser(BaseModel):
    name: str | None
    image: str | None


class CookingResponse(BaseModel):
    """Who else is on a recipe page right now."""

    count: int
    users: list[CookingUser]
