"""Presence tracker for live "who's cooking this" indicators."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models import Presence, Recipe
from src.services.payloads import load_users, not_found
from src.services.realtime import RealtimeEventType, publish_recipe_event

logger = logging.getLogger(__name__)

MAX_COOKING_USERS = 5


class PresenceService:
    """Heartbeat-based presence with TTL liveness.

    Clients heartbeat every ~10s while a recipe page is open. Rows whose last
    heartbeat is older than the TTL are ignored by readers, so a missed
    ``leave`` never leaves a user shown as cooking.
    """

    def __init__(self, db: Session, ttl_seconds: int | None = None):
        self.db = db
        if ttl_seconds is None:
            ttl_seconds = get_settings().presence_ttl_seconds
        self.ttl = timedelta(seconds=ttl_seconds)

    def heartbeat(self, user_id: int, recipe_id: int, now: datetime | None = None) -> None:
        """Record that the user is on the recipe page right now."""
        now = now or datetime.now(UTC)
        if not self.db.query(Recipe.id).filter(Recipe.id == recipe_id).first():
            raise not_found("Recipe")

        existing = (
            self.db.query(Presence)
            .filter(Presence.user_id == user_id, Presence.recipe_id == recipe_id)
            .first()
        )
        if existing:
            existing.last_seen = now
            self.db.commit()
            return

        self.db.add(Presence(user_id=user_id, recipe_id=recipe_id, last_seen=now))
        try:
            self.db.commit()
        except IntegrityError:
            # Two tabs heartbeating at once; the other insert won
            self.db.rollback()
            self.db.query(Presence).filter(
                Presence.user_id == user_id, Presence.recipe_id == recipe_id
            ).update({"last_seen": now}, synchronize_session=False)
            self.db.commit()
            return

        publish_recipe_event(recipe_id, RealtimeEventType.PRESENCE_CHANGED, {"joined": user_id})

    def leave(self, user_id: int, recipe_id: int) -> None:
        """Drop the user's presence row immediately (best effort)."""
        deleted = (
            self.db.query(Presence)
            .filter(Presence.user_id == user_id, Presence.recipe_id == recipe_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            publish_recipe_event(recipe_id, RealtimeEventType.PRESENCE_CHANGED, {"left": user_id})

    def get_cooking(
        self, recipe_id: int, caller_id: int | None = None, now: datetime | None = None
    ) -> dict:
        """
        Users actively on a recipe page, excluding the caller.

        Returns:
            {"count": int, "users": [{"name", "image"}, ...]} with at most 5 users
        """
        now = now or datetime.now(UTC)
        cutoff = now - self.ttl

        query = self.db.query(Presence).filter(
            Presence.recipe_id == recipe_id, Presence.last_seen > cutoff
        )
        if caller_id is not None:
            query = query.filter(Presence.user_id != caller_id)
        active = query.order_by(Presence.last_seen.desc(), Presence.id.desc()).all()

        shown = active[:MAX_COOKING_USERS]
        users = load_users(self.db, {p.user_id for p in shown})
        return {
            "count": len(active),
            "users": [
                {"name": users[p.user_id].name, "image": users[p.user_id].image}
                for p in shown
                if p.user_id in users
            ],
        }

    def sweep_stale(self, now: datetime | None = None, batch_size: int = 500) -> int:
        """Delete up to ``batch_size`` stale presence rows. Returns rows deleted."""
        now = now or datetime.now(UTC)
        cutoff = now - self.ttl
        stale_ids = [
            presence_id
            for (presence_id,) in self.db.query(Presence.id)
            .filter(Presence.last_seen <= cutoff)
            .limit(batch_size)
            .all()
        ]
        if not stale_ids:
            return 0

        deleted = (
            self.db.query(Presence)
            .filter(Presence.id.in_(stale_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
