"""Collection endpoints for organizing bookmarks."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_collection_service, get_current_user
from src.models.user import User
from src.schemas.collection import (
    BookmarkResponse,
    CollectionCreate,
    CollectionResponse,
    MoveBookmarkRequest,
)
from src.schemas.recipe import BookmarkedRecipeResponse
from src.services.collection_service import CollectionService

router = APIRouter(prefix="/api/v1/collections", tags=["collections"])


@router.get("", response_model=list[CollectionResponse])
async def list_collections(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    """List the current user's collections with bookmark counts."""
    return service.list_for_user(current_user.id)


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection(
    collection_data: CollectionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    return service.create(current_user.id, collection_data.name)


@router.get("/uncategorized", response_model=list[BookmarkedRecipeResponse])
async def uncategorized_bookmarks(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    """Bookmarked recipes that are not in any collection."""
    return service.get_bookmarks(current_user.id, None)


@router.put("/bookmarks/{bookmark_id}", response_model=BookmarkResponse)
async def move_bookmark(
    bookmark_id: int,
    move: MoveBookmarkRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    """Move a bookmark into a collection, or to uncategorized with a null id."""
    return service.move_bookmark(current_user.id, bookmark_id, move.collection_id)


@router.get("/{collection_id}/bookmarks", response_model=list[BookmarkedRecipeResponse])
async def collection_bookmarks(
    collection_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    return service.get_bookmarks(current_user.id, collection_id)


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection(
    collection_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[CollectionService, Depends(get_collection_service)],
):
    """Delete a collection. Its bookmarks become uncategorized."""
    service.remove(current_user.id, collection_id)
