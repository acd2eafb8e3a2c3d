"""Recipe API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_blob_store,
    get_current_user,
    get_discovery_service,
    get_optional_user,
    get_recipe_importer,
    get_recipe_service,
)
from src.models.user import User
from src.schemas.recipe import (
    BookmarkedRecipeResponse,
    RecipeCreate,
    RecipeDetailResponse,
    RecipeImportRequest,
    RecipeImportResponse,
    RecipePage,
    RecipeResponse,
    RecipeUpdate,
    UploadUrlResponse,
)
from src.services.discovery_service import DiscoveryService
from src.services.payloads import recipe_payload
from src.services.recipe_import import RecipeImporter
from src.services.recipe_service import RecipeService
from src.services.storage import BlobStore

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


# --- Static routes first (before /{recipe_id}) ---


@router.get("", response_model=RecipePage)
async def list_recipes(
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    cursor: str | None = None,
    category: str | None = None,
):
    """List published recipes newest first, one page at a time."""
    return service.list_published(page_size=page_size, cursor=cursor, category=category)


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe_data: RecipeCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Create a recipe (draft by default)."""
    recipe = service.create(current_user.id, recipe_data.model_dump())
    return recipe_payload(recipe, store)


@router.get("/mine", response_model=list[RecipeResponse])
async def my_recipes(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """List the current user's recipes, drafts included."""
    return service.list_by_user(current_user.id, current_user.id)


@router.get("/bookmarks", response_model=list[BookmarkedRecipeResponse])
async def my_bookmarks(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """List every recipe the current user saved, across collections."""
    return service.list_bookmarked(current_user.id)


@router.post("/upload-url", response_model=UploadUrlResponse)
async def generate_upload_url(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Issue an upload URL for a cover image."""
    return service.generate_upload_url()


@router.post("/import", response_model=RecipeImportResponse)
async def import_recipe(
    data: RecipeImportRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    importer: Annotated[RecipeImporter, Depends(get_recipe_importer)],
):
    """Extract a recipe from a web page without saving it."""
    return await importer.import_from_url(data.url)


@router.get("/by-slug/{slug}", response_model=RecipeDetailResponse)
async def get_recipe_by_slug(
    slug: str,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Get a recipe page. Drafts are only visible to their owner."""
    return service.get_by_slug(slug, current_user.id if current_user else None)


# --- Dynamic recipe routes (must be last) ---


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Get one of the current user's recipes for editing."""
    return service.get_owned(current_user.id, recipe_id)


@router.put("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: int,
    recipe_data: RecipeUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Update a recipe."""
    recipe = service.update(current_user.id, recipe_id, recipe_data.model_dump(exclude_unset=True))
    return recipe_payload(recipe, store)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Delete a recipe with its comments, likes and bookmarks."""
    service.delete(current_user.id, recipe_id)


@router.post(
    "/{recipe_id}/fork", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED
)
async def fork_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Copy a recipe into a new draft owned by the current user."""
    recipe = service.fork(current_user.id, recipe_id)
    return recipe_payload(recipe, store)


@router.post("/{recipe_id}/views", status_code=status.HTTP_204_NO_CONTENT)
async def record_view(
    recipe_id: int,
    service: Annotated[DiscoveryService, Depends(get_discovery_service)],
):
    """Record a page view (anonymous allowed)."""
    service.record_view(recipe_id)
