"""Like, bookmark, rating and comment endpoints for recipes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_current_user, get_optional_user, get_social_service
from src.models.user import User
from src.schemas.common import SuccessResponse
from src.schemas.social import (
    BookmarkToggleRequest,
    BookmarkToggleResponse,
    CommentCreate,
    CommentResponse,
    LikeToggleResponse,
    RatingCreate,
    RatingStatsResponse,
)
from src.services.social_service import SocialService

router = APIRouter(prefix="/api/v1/recipes", tags=["social"])


@router.post("/{recipe_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SocialService, Depends(get_social_service)],
):
    """Like the recipe, or remove the like if it exists."""
    return service.toggle_like(current_user.id, recipe_id)


@router.post("/{recipe_id}/bookmark", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SocialService, Depends(get_social_service)],
    body: BookmarkToggleRequest | None = None,
):
    """Save the recipe (optionally into a collection), or unsave it."""
    collection_id = body.collection_id if body else None
    return service.toggle_bookmark(current_user.id, recipe_id, collection_id)


@router.post("/{recipe_id}/rating", response_model=SuccessResponse)
async def rate_recipe(
    recipe_id: int,
    rating: RatingCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SocialService, Depends(get_social_service)],
):
    """Set the current user's 1-5 rating, replacing any earlier one."""
    return service.rate(current_user.id, recipe_id, rating.value)


@router.get("/{recipe_id}/rating", response_model=RatingStatsResponse)
async def get_rating(
    recipe_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[SocialService, Depends(get_social_service)],
):
    return service.get_rating_stats(recipe_id, current_user.id if current_user else None)


@router.get("/{recipe_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    recipe_id: int,
    service: Annotated[SocialService, Depends(get_social_service)],
):
    """List comments newest first."""
    return service.list_comments(recipe_id)


@router.post(
    "/{recipe_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    recipe_id: int,
    comment_data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SocialService, Depends(get_social_service)],
):
    """Comment on a published recipe."""
    comment = service.add_comment(current_user.id, recipe_id, comment_data.content)
    return CommentResponse(
        id=comment.id,
        recipe_id=comment.recipe_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        user={"name": current_user.name, "image": current_user.image},
    )
