"""Tests for the periodic maintenance tasks."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from src.celery_app import app as celery_app
from src.models import Bookmark, Collection, Comment, Like, Notification, Recipe, RecipeView
from src.tasks.maintenance import (
    cleanup_old_views,
    delete_old_views,
    publish_scheduled_recipes,
    reconcile,
    reconcile_orphans,
    sweep_stale_presence,
)


@pytest.fixture
def task_db(db):
    """Point the tasks' SessionLocal at the test session."""
    with patch("src.tasks.maintenance.SessionLocal", return_value=db):
        yield db


def _recipe(db, user_id: int, **fields) -> Recipe:
    recipe = Recipe(
        slug=fields.pop("slug", f"r-{datetime.now(UTC).timestamp()}"),
        title=fields.pop("title", "Stew"),
        category="dinner",
        user_id=user_id,
        **fields,
    )
    db.add(recipe)
    db.commit()
    return recipe


def test_beat_schedule_registers_all_jobs():
    scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}
    assert scheduled == {
        "src.tasks.maintenance.cleanup_old_views",
        "src.tasks.maintenance.publish_scheduled_recipes",
        "src.tasks.maintenance.sweep_stale_presence",
        "src.tasks.maintenance.reconcile_orphans",
    }


def test_delete_old_views_is_bounded(db, auth_headers):
    recipe = _recipe(db, auth_headers.user_id)
    now = datetime.now(UTC)
    db.add_all(
        RecipeView(recipe_id=recipe.id, timestamp=now - timedelta(days=31)) for _ in range(3)
    )
    db.add(RecipeView(recipe_id=recipe.id, timestamp=now - timedelta(days=1)))
    db.commit()

    assert delete_old_views(db, now, retention_days=30, batch_size=2) == 2
    assert delete_old_views(db, now, retention_days=30, batch_size=2) == 1
    assert delete_old_views(db, now, retention_days=30, batch_size=2) == 0
    assert db.query(RecipeView).count() == 1


def test_cleanup_old_views_task(task_db, auth_headers):
    recipe = _recipe(task_db, auth_headers.user_id)
    task_db.add(RecipeView(recipe_id=recipe.id, timestamp=datetime.now(UTC) - timedelta(days=40)))
    task_db.commit()

    assert cleanup_old_views() == {"deleted": 1}


def test_publish_scheduled_task(task_db, auth_headers):
    recipe_id = _recipe(
        task_db, auth_headers.user_id, publish_at=datetime.now(UTC) - timedelta(minutes=5)
    ).id

    with patch("src.tasks.maintenance.S3BlobStore"):
        assert publish_scheduled_recipes() == {"published": 1}

    assert task_db.get(Recipe, recipe_id).status == "published"


def test_sweep_stale_presence_task(task_db, client, auth_headers, other_headers, create_recipe):
    recipe = create_recipe(auth_headers)
    client.post(f"/api/v1/recipes/{recipe['id']}/presence", headers=other_headers)

    # Fresh heartbeat survives the sweep
    assert sweep_stale_presence() == {"deleted": 0}


def test_reconcile_repairs_dangling_rows(db, auth_headers, other_headers):
    if db.get_bind().dialect.name != "sqlite":
        pytest.skip("dangling rows can only be created where foreign keys are not enforced")

    kept = _recipe(db, auth_headers.user_id, slug="kept-aaaaaa")
    fork = _recipe(db, other_headers.user_id, slug="fork-aaaaaa", forked_from_id=999999)
    db.add_all(
        [
            Like(user_id=other_headers.user_id, recipe_id=999999),
            Like(user_id=other_headers.user_id, recipe_id=kept.id),
            Comment(user_id=other_headers.user_id, recipe_id=999999, content="orphan"),
            Bookmark(user_id=other_headers.user_id, recipe_id=kept.id, collection_id=888888),
            Notification(
                user_id=auth_headers.user_id,
                type="like",
                actor_id=other_headers.user_id,
                recipe_id=999999,
            ),
        ]
    )
    db.commit()

    stats = reconcile(db, batch_size=100)

    assert stats == {
        "likes": 1,
        "comments": 1,
        "notifications": 1,
        "forks": 1,
        "uncategorized_bookmarks": 1,
    }
    assert db.query(Like).one().recipe_id == kept.id
    assert db.query(Comment).count() == 0
    assert db.query(Bookmark).one().collection_id is None
    assert db.query(Notification).one().recipe_id is None
    db.refresh(fork)
    assert fork.forked_from_id is None

    # Nothing left to repair
    assert reconcile(db, batch_size=100) == {}


def test_reconcile_keeps_consistent_rows(db, auth_headers, other_headers):
    recipe = _recipe(db, auth_headers.user_id)
    collection = Collection(user_id=other_headers.user_id, name="Keep")
    db.add(collection)
    db.commit()
    db.add(
        Bookmark(user_id=other_headers.user_id, recipe_id=recipe.id, collection_id=collection.id)
    )
    db.commit()

    assert reconcile(db, batch_size=100) == {}
    assert db.query(Bookmark).one().collection_id == collection.id


def test_reconcile_orphans_task(task_db):
    assert reconcile_orphans() == {}
