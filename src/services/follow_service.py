"""Follow graph: directed follow edges between users."""

import logging
from typing import Protocol

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models import Follow, User
from src.models.enums import NotificationType
from src.services.notification_service import NotificationService
from src.services.payloads import not_found

logger = logging.getLogger(__name__)


class FollowCountSource(Protocol):
    """Where follower/following totals come from.

    The default scans the follow edges on every call; a maintained counter
    can replace it without touching FollowService callers.
    """

    def counts(self, user_id: int) -> dict: ...


class EdgeScanFollowCounts:
    """Counts follow edges with two indexed count queries."""

    def __init__(self, db: Session):
        self.db = db

    def counts(self, user_id: int) -> dict:
        followers = (
            self.db.query(func.count(Follow.id)).filter(Follow.following_id == user_id).scalar()
        )
        following = (
            self.db.query(func.count(Follow.id)).filter(Follow.follower_id == user_id).scalar()
        )
        return {"followers": followers or 0, "following": following or 0}


class FollowService:
    """Service for following users and reading the follow graph."""

    def __init__(self, db: Session, count_source: FollowCountSource | None = None):
        self.db = db
        self.notifications = NotificationService(db)
        self.count_source = count_source or EdgeScanFollowCounts(db)

    def toggle(self, follower_id: int, target_id: int) -> dict:
        """
        Follow or unfollow a user.

        Returns:
            {"following": bool}
        """
        if follower_id == target_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot follow yourself"
            )

        target = self.db.query(User.id).filter(User.id == target_id).first()
        if not target:
            raise not_found("User")

        existing = (
            self.db.query(Follow)
            .filter(Follow.follower_id == follower_id, Follow.following_id == target_id)
            .first()
        )

        if existing:
            self.db.delete(existing)
            self.db.commit()
            return {"following": False}

        self.db.add(Follow(follower_id=follower_id, following_id=target_id))
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent follow from user {follower_id} to user {target_id}")
            return {"following": True}

        notification = self.notifications.create(target_id, NotificationType.FOLLOW, follower_id)
        self.db.commit()
        self.notifications.publish(notification)
        return {"following": True}

    def is_following(self, follower_id: int | None, target_id: int) -> bool:
        if follower_id is None:
            return False
        return (
            self.db.query(Follow.id)
            .filter(Follow.follower_id == follower_id, Follow.following_id == target_id)
            .first()
            is not None
        )

    def counts(self, user_id: int) -> dict:
        """Follower and following totals: {"followers": int, "following": int}."""
        return self.count_source.counts(user_id)

    def following_ids(self, user_id: int) -> set[int]:
        """Ids of every user the given user follows."""
        rows = self.db.query(Follow.following_id).filter(Follow.follower_id == user_id).all()
        return {following_id for (following_id,) in rows}
