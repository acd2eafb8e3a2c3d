"""Notification ledger: append-only per-user social events."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.models import Notification, Recipe
from src.models.enums import NotificationType
from src.services.payloads import load_users, user_summary
from src.services.realtime import RealtimeEventType, publish_user_event

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for writing and reading a user's notifications."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        recipient_id: int,
        notification_type: NotificationType,
        actor_id: int,
        recipe_id: int | None = None,
    ) -> Notification | None:
        """
        Stage a notification in the caller's unit of work.

        The row is flushed but not committed, so it lands in the same commit
        as the action that caused it. Call ``publish`` after committing.

        Returns:
            The new notification, or None when the actor is the recipient
        """
        if recipient_id == actor_id:
            logger.debug(f"Skipping self-notification for user {recipient_id}")
            return None

        notification = Notification(
            user_id=recipient_id,
            type=notification_type.value,
            actor_id=actor_id,
            recipe_id=recipe_id,
            read=False,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def publish(self, notification: Notification | None) -> None:
        """Push a committed notification to the recipient's realtime channel."""
        if notification is None:
            return
        logger.info(
            f"Created {notification.type} notification {notification.id} "
            f"for user {notification.user_id}"
        )
        publish_user_event(
            notification.user_id,
            RealtimeEventType.NOTIFICATION_CREATED,
            {"notification_id": notification.id, "type": notification.type},
        )

    def list_for_user(self, user_id: int, limit: int = 20) -> list[dict]:
        """
        List a user's notifications newest first with actor and recipe summaries.

        Actors and recipes are resolved with one query each over the distinct
        ids on the page.
        """
        notifications = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

        actor_ids = {n.actor_id for n in notifications}
        recipe_ids = {n.recipe_id for n in notifications if n.recipe_id is not None}

        actors = load_users(self.db, actor_ids)
        recipes = {}
        if recipe_ids:
            recipes = {
                r.id: r for r in self.db.query(Recipe).filter(Recipe.id.in_(recipe_ids)).all()
            }

        result = []
        for n in notifications:
            actor = actors.get(n.actor_id)
            recipe = recipes.get(n.recipe_id) if n.recipe_id is not None else None
            result.append(
                {
                    "id": n.id,
                    "type": n.type,
                    "read": n.read,
                    "recipe_id": n.recipe_id,
                    "created_at": n.created_at,
                    "actor": user_summary(actor) if actor else None,
                    "recipe": {"title": recipe.title, "slug": recipe.slug} if recipe else None,
                }
            )
        return result

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .scalar()
            or 0
        )

    def mark_all_read(self, user_id: int) -> int:
        """
        Mark every currently-unread notification of the user as read.

        Rows created after the update statement starts stay unread.

        Returns:
            Number of notifications updated
        """
        count = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .update({"read": True}, synchronize_session=False)
        )
        self.db.commit()

        if count > 0:
            publish_user_event(user_id, RealtimeEventType.NOTIFICATIONS_READ, {"count": count})
        return count

    def mark_read(self, user_id: int, notification_id: int) -> bool:
        """Mark one notification as read. No-op unless it belongs to the user."""
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            return False
        if not notification.read:
            notification.read = True
            self.db.commit()
        return True
