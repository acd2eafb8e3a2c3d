"""Social toggle engine: likes, bookmarks, ratings and comments."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models import Bookmark, Collection, Comment, Like, Rating
from src.models.enums import NotificationType
from src.services.notification_service import NotificationService
from src.services.payloads import load_users, not_found, require_published_recipe
from src.services.realtime import RealtimeEventType, publish_recipe_event
from src.services.validation import sanitize_input, validate_length

logger = logging.getLogger(__name__)

COMMENT_MIN_LENGTH = 1
COMMENT_MAX_LENGTH = 500
RATING_MIN = 1
RATING_MAX = 5


class SocialService:
    """Service for per-user associations with published recipes.

    Toggles are read-then-write; the unique constraints on (user_id, recipe_id)
    are what guarantee at most one row per pair. A losing concurrent insert is
    rolled back and reported as the settled state.
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    # --- Likes ---

    def toggle_like(self, user_id: int, recipe_id: int) -> dict:
        """
        Like or unlike a published recipe.

        Returns:
            {"liked": bool, "likes_count": int}
        """
        recipe = require_published_recipe(self.db, recipe_id)

        existing = (
            self.db.query(Like).filter(Like.user_id == user_id, Like.recipe_id == recipe_id).first()
        )

        if existing:
            self.db.delete(existing)
            self.db.commit()
            liked = False
        else:
            self.db.add(Like(user_id=user_id, recipe_id=recipe_id))
            try:
                self.db.flush()
            except IntegrityError:
                # A concurrent request inserted the same like first
                self.db.rollback()
                logger.warning(f"Concurrent like for user {user_id} on recipe {recipe_id}")
                return {"liked": True, "likes_count": self.likes_count(recipe_id)}

            notification = self.notifications.create(
                recipe.user_id, NotificationType.LIKE, user_id, recipe_id
            )
            self.db.commit()
            self.notifications.publish(notification)
            liked = True

        likes_count = self.likes_count(recipe_id)
        publish_recipe_event(
            recipe_id, RealtimeEventType.LIKES_CHANGED, {"likes_count": likes_count}
        )
        return {"liked": liked, "likes_count": likes_count}

    def likes_count(self, recipe_id: int) -> int:
        return (
            self.db.query(func.count(Like.id)).filter(Like.recipe_id == recipe_id).scalar() or 0
        )

    def is_liked(self, user_id: int | None, recipe_id: int) -> bool:
        if user_id is None:
            return False
        return (
            self.db.query(Like.id)
            .filter(Like.user_id == user_id, Like.recipe_id == recipe_id)
            .first()
            is not None
        )

    # --- Bookmarks ---

    def toggle_bookmark(
        self, user_id: int, recipe_id: int, collection_id: int | None = None
    ) -> dict:
        """
        Save or unsave a published recipe, optionally into a collection.

        Returns:
            {"bookmarked": bool}
        """
        require_published_recipe(self.db, recipe_id)

        if collection_id is not None:
            collection = (
                self.db.query(Collection)
                .filter(Collection.id == collection_id, Collection.user_id == user_id)
                .first()
            )
            if not collection:
                raise not_found("Collection")

        existing = (
            self.db.query(Bookmark)
            .filter(Bookmark.user_id == user_id, Bookmark.recipe_id == recipe_id)
            .first()
        )

        if existing:
            self.db.delete(existing)
            self.db.commit()
            return {"bookmarked": False}

        self.db.add(Bookmark(user_id=user_id, recipe_id=recipe_id, collection_id=collection_id))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent bookmark for user {user_id} on recipe {recipe_id}")
        return {"bookmarked": True}

    def is_bookmarked(self, user_id: int | None, recipe_id: int) -> bool:
        if user_id is None:
            return False
        return (
            self.db.query(Bookmark.id)
            .filter(Bookmark.user_id == user_id, Bookmark.recipe_id == recipe_id)
            .first()
            is not None
        )

    # --- Ratings ---

    def rate(self, user_id: int, recipe_id: int, value: int) -> dict:
        """Create or replace the user's rating of a published recipe."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Rating must be a whole number"
            )
        if value < RATING_MIN or value > RATING_MAX:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Rating must be {RATING_MIN}-{RATING_MAX}",
            )

        require_published_recipe(self.db, recipe_id)

        if not self._upsert_rating(user_id, recipe_id, value):
            # Lost an insert race; the row exists now, so patch it
            self.db.rollback()
            self._upsert_rating(user_id, recipe_id, value)

        return {"success": True}

    def _upsert_rating(self, user_id: int, recipe_id: int, value: int) -> bool:
        existing = (
            self.db.query(Rating)
            .filter(Rating.user_id == user_id, Rating.recipe_id == recipe_id)
            .first()
        )
        if existing:
            existing.value = value
        else:
            self.db.add(Rating(user_id=user_id, recipe_id=recipe_id, value=value))
        try:
            self.db.commit()
        except IntegrityError:
            return False
        return True

    def get_rating_stats(self, recipe_id: int, user_id: int | None = None) -> dict:
        """
        Aggregate ratings for a recipe.

        Returns:
            {"average": float, "count": int, "user_rating": int | None}
        """
        ratings = self.db.query(Rating).filter(Rating.recipe_id == recipe_id).all()
        if not ratings:
            return {"average": 0, "count": 0, "user_rating": None}

        average = sum(r.value for r in ratings) / len(ratings)
        user_rating = None
        if user_id is not None:
            user_rating = next((r.value for r in ratings if r.user_id == user_id), None)

        return {"average": round(average, 1), "count": len(ratings), "user_rating": user_rating}

    # --- Comments ---

    def add_comment(self, user_id: int, recipe_id: int, content: str) -> Comment:
        """Add an HTML-escaped comment to a published recipe."""
        trimmed = validate_length(content, COMMENT_MIN_LENGTH, COMMENT_MAX_LENGTH, "Comment")
        recipe = require_published_recipe(self.db, recipe_id)

        comment = Comment(recipe_id=recipe_id, user_id=user_id, content=sanitize_input(trimmed))
        self.db.add(comment)
        self.db.flush()

        notification = self.notifications.create(
            recipe.user_id, NotificationType.COMMENT, user_id, recipe_id
        )
        self.db.commit()
        self.db.refresh(comment)
        self.notifications.publish(notification)
        publish_recipe_event(recipe_id, RealtimeEventType.COMMENT_ADDED, {"comment_id": comment.id})
        return comment

    def list_comments(self, recipe_id: int) -> list[dict]:
        """List a recipe's comments newest first with their authors."""
        comments = (
            self.db.query(Comment)
            .filter(Comment.recipe_id == recipe_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )
        authors = load_users(self.db, {c.user_id for c in comments})

        result = []
        for comment in comments:
            author = authors.get(comment.user_id)
            result.append(
                {
                    "id": comment.id,
                    "recipe_id": comment.recipe_id,
                    "user_id": comment.user_id,
                    "content": comment.content,
                    "created_at": comment.created_at,
                    "user": {"name": author.name, "image": author.image} if author else None,
                }
            )
        return result
