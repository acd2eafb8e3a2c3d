"""Celery tasks for periodic cleanup and scheduled publishing."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.models import (
    Bookmark,
    Collection,
    Comment,
    Like,
    Notification,
    Presence,
    Rating,
    Recipe,
    RecipeView,
)
from src.services.presence_service import PresenceService
from src.services.recipe_service import RecipeService
from src.services.storage import S3BlobStore

logger = logging.getLogger(__name__)

# Rows that cannot outlive their recipe
RECIPE_CHILD_MODELS = (Comment, Like, Bookmark, Rating, Presence, RecipeView)


def delete_old_views(db: Session, now: datetime, retention_days: int, batch_size: int) -> int:
    """Delete up to ``batch_size`` views older than the retention window."""
    cutoff = now - timedelta(days=retention_days)
    old_ids = [
        view_id
        for (view_id,) in db.query(RecipeView.id)
        .filter(RecipeView.timestamp < cutoff)
        .order_by(RecipeView.timestamp)
        .limit(batch_size)
        .all()
    ]
    if not old_ids:
        return 0

    deleted = (
        db.query(RecipeView).filter(RecipeView.id.in_(old_ids)).delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def reconcile(db: Session, batch_size: int) -> dict:
    """Repair references left dangling by interrupted or out-of-band deletes.

    Child rows of missing recipes are deleted; notifications and forks of
    missing recipes, and bookmarks in missing collections, have the reference
    cleared. Each kind is capped at ``batch_size`` rows per run.

    Returns:
        Counts of repaired rows keyed by table name
    """
    recipe_ids = select(Recipe.id)
    stats = {}

    for model in RECIPE_CHILD_MODELS:
        orphan_ids = [
            row_id
            for (row_id,) in db.query(model.id)
            .filter(model.recipe_id.not_in(recipe_ids))
            .limit(batch_size)
            .all()
        ]
        if orphan_ids:
            stats[model.__tablename__] = (
                db.query(model).filter(model.id.in_(orphan_ids)).delete(synchronize_session=False)
            )

    detached = {
        "notifications": (Notification, Notification.recipe_id, recipe_ids),
        "forks": (Recipe, Recipe.forked_from_id, recipe_ids),
        "uncategorized_bookmarks": (Bookmark, Bookmark.collection_id, select(Collection.id)),
    }
    for label, (model, column, existing) in detached.items():
        stale_ids = [
            row_id
            for (row_id,) in db.query(model.id)
            .filter(column.isnot(None), column.not_in(existing))
            .limit(batch_size)
            .all()
        ]
        if stale_ids:
            stats[label] = (
                db.query(model)
                .filter(model.id.in_(stale_ids))
                .update({column.key: None}, synchronize_session=False)
            )

    db.commit()
    return stats


@celery_app.task
def cleanup_old_views() -> dict:
    """Delete recipe views past the retention window.

    Runs daily at 03:00 UTC via celery-beat.
    """
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        deleted = delete_old_views(
            db,
            datetime.now(UTC),
            settings.view_retention_days,
            settings.view_cleanup_batch_size,
        )
        logger.info(f"Deleted {deleted} old recipe views")
        return {"deleted": deleted}
    finally:
        db.close()


@celery_app.task
def publish_scheduled_recipes() -> dict:
    """Publish drafts whose scheduled publish time has passed. Runs every 5 minutes."""
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        published = RecipeService(db, S3BlobStore()).publish_scheduled(
            batch_size=settings.scheduled_publish_batch_size
        )
        return {"published": published}
    finally:
        db.close()


@celery_app.task
def sweep_stale_presence() -> dict:
    """Remove presence rows nobody has refreshed within the TTL."""
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        deleted = PresenceService(db).sweep_stale(batch_size=settings.presence_sweep_batch_size)
        if deleted:
            logger.info(f"Swept {deleted} stale presence rows")
        return {"deleted": deleted}
    finally:
        db.close()


@celery_app.task
def reconcile_orphans() -> dict:
    """Hourly repair of dangling references."""
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        stats = reconcile(db, settings.orphan_reconcile_batch_size)
        if stats:
            logger.warning(f"Reconciled orphaned rows: {stats}")
        return stats
    finally:
        db.close()
