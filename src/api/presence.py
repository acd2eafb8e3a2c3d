"""Presence endpoints: who is cooking a recipe right now."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_current_user, get_optional_user, get_presence_service
from src.models.user import User
from src.schemas.presence import CookingResponse
from src.services.presence_service import PresenceService

router = APIRouter(prefix="/api/v1/recipes", tags=["presence"])


@router.post("/{recipe_id}/presence", status_code=status.HTTP_204_NO_CONTENT)
async def heartbeat(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PresenceService, Depends(get_presence_service)],
):
    """Mark the current user as active on the recipe page.

    Clients call this periodically while the page is open; a user counts as
    cooking until their last heartbeat is older than the presence TTL.
    """
    service.heartbeat(current_user.id, recipe_id)


@router.delete("/{recipe_id}/presence", status_code=status.HTTP_204_NO_CONTENT)
async def leave(
    recipe_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[PresenceService, Depends(get_presence_service)],
):
    """Stop being shown on the recipe page. A no-op for anonymous callers."""
    if current_user is not None:
        service.leave(current_user.id, recipe_id)


@router.get("/{recipe_id}/cooking", response_model=CookingResponse)
async def get_cooking(
    recipe_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[PresenceService, Depends(get_presence_service)],
):
    """Other users active on the recipe within the TTL (caller excluded)."""
    return service.get_cooking(recipe_id, current_user.id if current_user else None)
