"""Recipe service for lifecycle operations: create, fork, publish and delete."""

import base64
import json
import logging
import re
import secrets
import string
from datetime import UTC, datetime

from fastapi import HTTPException, status
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from src.models import (
    Bookmark,
    Comment,
    Like,
    Notification,
    Presence,
    Rating,
    Recipe,
    RecipeView,
    User,
)
from src.models.enums import NotificationType, RecipeStatus
from src.services.notification_service import NotificationService
from src.services.payloads import (
    not_found,
    recipe_payload,
    require_owned_recipe,
    user_summary,
)
from src.services.social_service import SocialService
from src.services.storage import COVER_PREFIX, BlobStore

logger = logging.getLogger(__name__)

SLUG_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SLUG_SUFFIX_LENGTH = 6

# Fields copied onto a fork
FORKED_FIELDS = (
    "title",
    "description",
    "category",
    "ingredients",
    "steps",
    "video_url",
    "servings",
    "prep_time",
    "cook_time",
    "difficulty",
)


def generate_slug(title: str) -> str:
    """URL-safe slug from a title plus a random suffix, e.g. "lemon-tart-x3k9q2"."""
    base = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    suffix = "".join(secrets.choice(SLUG_SUFFIX_ALPHABET) for _ in range(SLUG_SUFFIX_LENGTH))
    return f"{base}-{suffix}" if base else suffix


def encode_cursor(recipe: Recipe) -> str:
    payload = json.dumps({"t": recipe.created_at.isoformat(), "id": recipe.id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, int]:
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()))
        return datetime.fromisoformat(payload["t"]), int(payload["id"])
    except (ValueError, KeyError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid cursor"
        ) from e


class RecipeService:
    """Service for recipe-related operations."""

    def __init__(self, db: Session, store: BlobStore):
        self.db = db
        self.store = store

    # --- Reads ---

    def get_by_slug(self, slug: str, viewer_id: int | None = None) -> dict:
        """
        Get a recipe page with author and the viewer's social state.

        Drafts are only visible to their owner; others get a 404.
        """
        recipe = self.db.query(Recipe).filter(Recipe.slug == slug).first()
        if not recipe or (not recipe.is_published and recipe.user_id != viewer_id):
            raise not_found("Recipe")

        social = SocialService(self.db)
        author = self.db.query(User).filter(User.id == recipe.user_id).first()
        return recipe_payload(
            recipe,
            self.store,
            author=user_summary(author) if author else None,
            likes_count=social.likes_count(recipe.id),
            is_liked=social.is_liked(viewer_id, recipe.id),
            is_bookmarked=social.is_bookmarked(viewer_id, recipe.id),
        )

    def get_owned(self, user_id: int, recipe_id: int) -> dict:
        """Get one of the user's own recipes (drafts included) for editing."""
        return recipe_payload(require_owned_recipe(self.db, recipe_id, user_id), self.store)

    def list_published(
        self, page_size: int = 20, cursor: str | None = None, category: str | None = None
    ) -> dict:
        """
        Page through published recipes newest first.

        Returns:
            {"items": [...], "next_cursor": str | None, "is_done": bool}
        """
        query = self.db.query(Recipe).filter(Recipe.status == RecipeStatus.PUBLISHED.value)
        if category:
            query = query.filter(Recipe.category == category)
        if cursor:
            created_at, recipe_id = decode_cursor(cursor)
            query = query.filter(
                or_(
                    Recipe.created_at < created_at,
                    and_(Recipe.created_at == created_at, Recipe.id < recipe_id),
                )
            )

        rows = (
            query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).limit(page_size + 1).all()
        )
        items = rows[:page_size]
        is_done = len(rows) <= page_size
        return {
            "items": [recipe_payload(r, self.store) for r in items],
            "next_cursor": None if is_done or not items else encode_cursor(items[-1]),
            "is_done": is_done,
        }

    def list_by_user(self, owner_id: int, viewer_id: int | None = None) -> list[dict]:
        """A user's recipes newest first; drafts only when the viewer is the owner."""
        query = self.db.query(Recipe).filter(Recipe.user_id == owner_id)
        if viewer_id != owner_id:
            query = query.filter(Recipe.status == RecipeStatus.PUBLISHED.value)
        recipes = query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).all()
        return [recipe_payload(r, self.store) for r in recipes]

    def list_bookmarked(self, user_id: int) -> list[dict]:
        """All recipes the user bookmarked, newest bookmark first."""
        rows = (
            self.db.query(Bookmark, Recipe)
            .join(Recipe, Recipe.id == Bookmark.recipe_id)
            .filter(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .all()
        )
        return [
            recipe_payload(
                recipe, self.store, bookmark_id=bookmark.id, collection_id=bookmark.collection_id
            )
            for bookmark, recipe in rows
            if recipe.is_published or recipe.user_id == user_id
        ]

    # --- Writes ---

    def create(self, user_id: int, data: dict) -> Recipe:
        """Create a recipe with a fresh unique slug."""
        fields = dict(data)
        self._check_cover(fields.get("cover_image"))
        if fields.get("status") == RecipeStatus.PUBLISHED.value:
            fields["publish_at"] = None

        recipe = Recipe(user_id=user_id, slug=self._unique_slug(fields["title"]), **fields)
        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)
        logger.info(f"User {user_id} created recipe {recipe.id} ({recipe.status})")
        return recipe

    def update(self, user_id: int, recipe_id: int, data: dict) -> Recipe:
        """Update fields of one of the user's recipes. The slug never changes."""
        recipe = require_owned_recipe(self.db, recipe_id, user_id)
        replaced_cover = None
        if "cover_image" in data and data["cover_image"] != recipe.cover_image:
            self._check_cover(data["cover_image"], recipe.id)
            replaced_cover = recipe.cover_image

        for field, value in data.items():
            setattr(recipe, field, value)
        if recipe.is_published:
            recipe.publish_at = None

        self.db.commit()
        self.db.refresh(recipe)
        if replaced_cover:
            self._release_blob(replaced_cover)
        return recipe

    def fork(self, user_id: int, recipe_id: int) -> Recipe:
        """
        Copy a published recipe (or one's own draft) into a new draft.

        The cover image is not copied; the blob stays owned by the original.
        """
        source = self.db.query(Recipe).filter(Recipe.id == recipe_id).first()
        if not source or (not source.is_published and source.user_id != user_id):
            raise not_found("Recipe")

        fork = Recipe(
            user_id=user_id,
            slug=self._unique_slug(source.title),
            status=RecipeStatus.DRAFT.value,
            forked_from_id=source.id,
            **{field: getattr(source, field) for field in FORKED_FIELDS},
        )
        self.db.add(fork)
        self.db.flush()

        notifications = NotificationService(self.db)
        notification = notifications.create(
            source.user_id, NotificationType.FORK, user_id, source.id
        )
        self.db.commit()
        self.db.refresh(fork)
        notifications.publish(notification)
        logger.info(f"User {user_id} forked recipe {source.id} into {fork.id}")
        return fork

    def delete(self, user_id: int, recipe_id: int) -> None:
        """
        Delete a recipe and everything that hangs off it.

        Comments, likes, bookmarks, ratings, presence and views are deleted,
        notifications and forks keep their rows with the reference cleared.
        All row changes share one commit; the cover blob is released after it
        and a failure there is only logged.
        """
        recipe = require_owned_recipe(self.db, recipe_id, user_id)
        cover_image = recipe.cover_image

        removed = self.purge_dependents(recipe_id)
        self.db.delete(recipe)
        self.db.commit()
        logger.info(f"Deleted recipe {recipe_id} with dependents {removed}")

        if cover_image:
            self._release_blob(cover_image)

    def purge_dependents(self, recipe_id: int) -> dict:
        """Remove or detach rows referencing a recipe. Safe to re-run; does not commit."""
        removed = {}
        for model in (Comment, Like, Bookmark, Rating, Presence, RecipeView):
            removed[model.__tablename__] = (
                self.db.query(model)
                .filter(model.recipe_id == recipe_id)
                .delete(synchronize_session=False)
            )
        self.db.query(Notification).filter(Notification.recipe_id == recipe_id).update(
            {"recipe_id": None}, synchronize_session=False
        )
        self.db.query(Recipe).filter(Recipe.forked_from_id == recipe_id).update(
            {"forked_from_id": None}, synchronize_session=False
        )
        return removed

    def generate_upload_url(self) -> dict:
        return self.store.generate_upload_url()

    def publish_scheduled(self, now: datetime | None = None, batch_size: int = 100) -> int:
        """
        Publish drafts whose scheduled time has passed.

        Returns:
            Number of recipes published
        """
        now = now or datetime.now(UTC)
        due = (
            self.db.query(Recipe)
            .filter(
                Recipe.status == RecipeStatus.DRAFT.value,
                Recipe.publish_at.isnot(None),
                Recipe.publish_at <= now,
            )
            .order_by(Recipe.publish_at, Recipe.id)
            .limit(batch_size)
            .all()
        )
        for recipe in due:
            recipe.status = RecipeStatus.PUBLISHED.value
            recipe.publish_at = None
        self.db.commit()

        if due:
            logger.info(f"Published {len(due)} scheduled recipes")
        return len(due)

    def _unique_slug(self, title: str) -> str:
        while True:
            slug = generate_slug(title)
            taken = self.db.query(func.count(Recipe.id)).filter(Recipe.slug == slug).scalar()
            if not taken:
                return slug

    def _check_cover(self, blob_id: str | None, recipe_id: int | None = None) -> None:
        """Only upload-issued keys not used by another recipe may become a cover."""
        if blob_id is None:
            return
        in_use = self.db.query(Recipe.id).filter(Recipe.cover_image == blob_id)
        if recipe_id is not None:
            in_use = in_use.filter(Recipe.id != recipe_id)
        if not blob_id.startswith(COVER_PREFIX) or in_use.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid cover image"
            )

    def _release_blob(self, blob_id: str) -> None:
        if self.db.query(Recipe.id).filter(Recipe.cover_image == blob_id).first():
            logger.warning(f"Blob {blob_id} is still used by another recipe; not deleted")
            return
        try:
            self.store.delete(blob_id)
        except Exception:
            logger.exception(f"Failed to delete blob {blob_id}; left for manual cleanup")
