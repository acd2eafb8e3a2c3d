"""Discovery endpoints: trending, recommendations, search and the follow feed."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_user, get_discovery_service, get_optional_user
from src.models.enums import Difficulty
from src.models.user import User
from src.schemas.recipe import FeedRecipeResponse, RecipeResponse, TrendingRecipeResponse
from src.services.discovery_service import DiscoveryService

router = APIRouter(prefix="/api/v1/discover", tags=["discovery"])


@router.get("/trending", response_model=list[TrendingRecipeResponse])
async def trending(
    service: Annotated[DiscoveryService, Depends(get_discovery_service)],
    limit: int = 10,
):
    """Most-liked published recipes of the last seven days."""
    return service.trending(limit=limit)


@router.get("/recommendations", response_model=list[RecipeResponse])
async def recommendations(
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[DiscoveryService, Depends(get_discovery_service)],
    limit: int = 10,
):
    """Recipes from the categories the caller likes, or the newest ones."""
    return service.recommendations(current_user.id if current_user else None, limit=limit)


@router.get("/search", response_model=list[RecipeResponse])
async def search(
    service: Annotated[DiscoveryService, Depends(get_discovery_service)],
    q: Annotated[str | None, Query(max_length=200)] = None,
    category: str | None = None,
    difficulty: Difficulty | None = None,
    max_time: Annotated[int | None, Query(ge=0)] = None,
    ingredient: Annotated[str | None, Query(max_length=100)] = None,
    limit: int = 20,
):
    """
    Search published recipes.

    Args:
        q: Title text to match
        category: Exact category
        difficulty: easy, medium or hard
        max_time: Upper bound on prep + cook minutes
        ingredient: Substring of any ingredient line
        limit: Maximum results (1-100)
    """
    return service.search(
        query=q,
        category=category,
        difficulty=difficulty.value if difficulty else None,
        max_time=max_time,
        ingredient=ingredient,
        limit=limit,
    )


@router.get("/feed", response_model=list[FeedRecipeResponse])
async def feed(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[DiscoveryService, Depends(get_discovery_service)],
    limit: int = 20,
):
    """Newest recipes from the users the caller follows."""
    return service.feed(current_user.id, limit=limit)
