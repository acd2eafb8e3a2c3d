"""User profile and follow endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import (
    get_current_user,
    get_follow_service,
    get_optional_user,
    get_recipe_service,
)
from src.database import get_db
from src.models.user import User
from src.schemas.auth import ProfileUpdate, PublicProfileResponse, UserResponse
from src.schemas.recipe import RecipeResponse
from src.schemas.social import FollowCountsResponse, FollowToggleResponse
from src.services.auth import get_user_by_username
from src.services.follow_service import FollowService
from src.services.payloads import not_found
from src.services.recipe_service import RecipeService
from src.services.validation import sanitize_input

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.put("/me", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the current user's public profile."""
    data = profile.model_dump(exclude_unset=True)

    username = data.get("username")
    if username and username != current_user.username:
        if get_user_by_username(db, username):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already taken",
            )
    if data.get("bio"):
        data["bio"] = sanitize_input(data["bio"].strip())

    for field, value in data.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.get("/by-username/{username}", response_model=PublicProfileResponse)
async def get_profile(
    username: str,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[Session, Depends(get_db)],
    follows: Annotated[FollowService, Depends(get_follow_service)],
):
    """Public profile with follower counts and whether the caller follows them."""
    user = get_user_by_username(db, username)
    if not user:
        raise not_found("User")

    counts = follows.counts(user.id)
    return PublicProfileResponse(
        id=user.id,
        name=user.name,
        username=user.username,
        image=user.image,
        bio=user.bio,
        followers=counts["followers"],
        following=counts["following"],
        is_following=follows.is_following(current_user.id if current_user else None, user.id),
    )


@router.get("/{user_id}/recipes", response_model=list[RecipeResponse])
async def user_recipes(
    user_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """A user's published recipes (drafts too when it is the caller's own list)."""
    return service.list_by_user(user_id, current_user.id if current_user else None)


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[FollowService, Depends(get_follow_service)],
):
    """Follow the user, or unfollow if already following."""
    return service.toggle(current_user.id, user_id)


@router.get("/{user_id}/follow", response_model=FollowToggleResponse)
async def is_following(
    user_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[FollowService, Depends(get_follow_service)],
):
    return {"following": service.is_following(current_user.id if current_user else None, user_id)}


@router.get("/{user_id}/follow-counts", response_model=FollowCountsResponse)
async def follow_counts(
    user_id: int,
    service: Annotated[FollowService, Depends(get_follow_service)],
):
    return service.counts(user_id)
