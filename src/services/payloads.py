"""Helpers that turn ORM rows into API payload dicts."""

from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from src.models import Recipe, User
from src.services.storage import BlobStore, cover_url

RECIPE_FIELDS = (
    "id",
    "slug",
    "title",
    "description",
    "category",
    "ingredients",
    "steps",
    "cover_image",
    "video_url",
    "status",
    "publish_at",
    "user_id",
    "forked_from_id",
    "servings",
    "prep_time",
    "cook_time",
    "difficulty",
    "created_at",
    "updated_at",
)


def user_summary(user: User) -> dict:
    """Public fields of a user embedded in notifications, feeds and comments."""
    return {"id": user.id, "name": user.name, "username": user.username, "image": user.image}


def recipe_payload(recipe: Recipe, store: BlobStore, **extra) -> dict:
    """Recipe fields plus a resolved cover_image_url and any extra keys."""
    data = {field: getattr(recipe, field) for field in RECIPE_FIELDS}
    data["cover_image_url"] = cover_url(store, recipe.cover_image)
    data.update(extra)
    return data


def load_users(db: Session, user_ids: Iterable[int]) -> dict[int, User]:
    """Fetch users by id in a single query."""
    ids = set(user_ids)
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


def not_found(entity: str) -> HTTPException:
    """404 used for both missing and not-visible entities."""
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def require_published_recipe(db: Session, recipe_id: int) -> Recipe:
    """Get a recipe that social actions may target.

    Missing and unpublished recipes are indistinguishable to the caller.
    """
    recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
    if not recipe or not recipe.is_published:
        raise not_found("Recipe")
    return recipe


def require_owned_recipe(db: Session, recipe_id: int, user_id: int) -> Recipe:
    """Get a recipe that belongs to the user."""
    recipe = db.query(Recipe).filter(Recipe.id == recipe_id, Recipe.user_id == user_id).first()
    if not recipe:
        raise not_found("Recipe")
    return recipe
