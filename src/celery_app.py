"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from src.config import get_settings

settings = get_settings()

app = Celery(
    "mise",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.maintenance"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
)

app.conf.beat_schedule = {
    "cleanup-old-views": {
        "task": "src.tasks.maintenance.cleanup_old_views",
        "schedule": crontab(hour=3, minute=0),
    },
    "publish-scheduled-recipes": {
        "task": "src.tasks.maintenance.publish_scheduled_recipes",
        "schedule": 300.0,
    },
    "sweep-stale-presence": {
        "task": "src.tasks.maintenance.sweep_stale_presence",
        "schedule": 600.0,
    },
    "reconcile-orphans": {
        "task": "src.tasks.maintenance.reconcile_orphans",
        "schedule": crontab(minute=15),
    },
}
