"""Discovery engine: trending, recommendations, search and the follow feed."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Protocol

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models import Like, Recipe, RecipeView
from src.models.enums import RecipeStatus
from src.services.follow_service import FollowService
from src.services.payloads import load_users, not_found, recipe_payload, user_summary
from src.services.storage import BlobStore
from src.services.validation import clamp_limit

logger = logging.getLogger(__name__)

# Candidate pool sizes
SEARCH_CANDIDATES = 100
RECOMMENDATION_SEED_LIKES = 10
RECOMMENDATIONS_PER_CATEGORY = 20


class TrendingSource(Protocol):
    """Where per-recipe engagement counts for the trending window come from.

    The default scans likes on every call; a maintained rolling counter can
    replace it without touching DiscoveryService callers.
    """

    def top(self, since: datetime, limit: int) -> list[tuple[int, int]]:
        """Top (recipe_id, like_count) pairs for likes created after ``since``.

        Ordered by count descending, then recipe id ascending.
        """
        ...


class LikeScanTrendingSource:
    """Counts likes in the window with a grouped query over the likes table."""

    def __init__(self, db: Session):
        self.db = db

    def top(self, since: datetime, limit: int) -> list[tuple[int, int]]:
        like_count = func.count(Like.id)
        rows = (
            self.db.query(Like.recipe_id, like_count)
            .filter(Like.created_at > since)
            .group_by(Like.recipe_id)
            .order_by(like_count.desc(), Like.recipe_id.asc())
            .limit(limit)
            .all()
        )
        return [(recipe_id, count) for recipe_id, count in rows]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DiscoveryService:
    """Service for finding recipes: trending, recommended, searched and followed."""

    def __init__(
        self,
        db: Session,
        store: BlobStore,
        trending_source: TrendingSource | None = None,
    ):
        self.db = db
        self.store = store
        self.settings = get_settings()
        self.trending_source = trending_source or LikeScanTrendingSource(db)

    def _published(self):
        return self.db.query(Recipe).filter(Recipe.status == RecipeStatus.PUBLISHED.value)

    def _recent_published(self, limit: int, category: str | None = None) -> list[Recipe]:
        query = self._published()
        if category:
            query = query.filter(Recipe.category == category)
        return query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).limit(limit).all()

    # --- Trending ---

    def trending(self, limit: int = 10, now: datetime | None = None) -> list[dict]:
        """
        Most-liked published recipes over the trailing window.

        Ties in like count rank the lower recipe id first. The top ``limit``
        ids are picked before unpublished or deleted recipes are dropped, so
        fewer than ``limit`` results can come back.
        """
        limit = clamp_limit(limit, self.settings.search_max_limit)
        now = now or datetime.now(UTC)
        since = now - timedelta(days=self.settings.trending_window_days)

        ranked = self.trending_source.top(since, limit)
        if not ranked:
            return []

        recipes = {
            r.id: r
            for r in self.db.query(Recipe).filter(Recipe.id.in_([rid for rid, _ in ranked])).all()
        }

        result = []
        for recipe_id, score in ranked:
            recipe = recipes.get(recipe_id)
            if recipe is None or not recipe.is_published:
                continue
            result.append(recipe_payload(recipe, self.store, trending_score=score))
        return result

    # --- Recommendations ---

    def recommendations(self, user_id: int | None = None, limit: int = 10) -> list[dict]:
        """
        Content-based recommendations from the categories of recipes the user liked.

        Falls back to the most recent published recipes for anonymous users
        and users without likes.
        """
        limit = clamp_limit(limit, self.settings.search_max_limit)

        if user_id is None:
            return self._recency_fallback(limit)

        liked_ids = [
            recipe_id
            for (recipe_id,) in self.db.query(Like.recipe_id)
            .filter(Like.user_id == user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .all()
        ]
        if not liked_ids:
            return self._recency_fallback(limit)

        seed_ids = liked_ids[:RECOMMENDATION_SEED_LIKES]
        seeds = {r.id: r for r in self.db.query(Recipe).filter(Recipe.id.in_(seed_ids)).all()}

        # Distinct categories in the order of the user's most recent likes
        categories: list[str] = []
        for recipe_id in seed_ids:
            recipe = seeds.get(recipe_id)
            if recipe is not None and recipe.category not in categories:
                categories.append(recipe.category)

        excluded = set(liked_ids)
        picked: dict[int, Recipe] = {}
        for category in categories:
            for recipe in self._recent_published(RECOMMENDATIONS_PER_CATEGORY, category):
                if recipe.id in excluded or recipe.user_id == user_id:
                    continue
                picked.setdefault(recipe.id, recipe)

        return [recipe_payload(r, self.store) for r in list(picked.values())[:limit]]

    def _recency_fallback(self, limit: int) -> list[dict]:
        return [recipe_payload(r, self.store) for r in self._recent_published(limit)]

    # --- Search ---

    def search(
        self,
        query: str | None = None,
        category: str | None = None,
        difficulty: str | None = None,
        max_time: int | None = None,
        ingredient: str | None = None,
        limit: int = 20,
    ) -> list[dict]:
        """
        Multi-criterion recipe search.

        Exactly one retrieval strategy runs (title text, then category, then
        all published), each capped at 100 candidates. Difficulty, total time
        and ingredient filters are then applied to the candidates in memory.
        """
        limit = clamp_limit(limit, self.settings.search_max_limit)
        query = (query or "").strip()
        category = (category or "").strip() or None
        ingredient = (ingredient or "").strip()

        if query:
            candidates = self._search_titles(query, category, SEARCH_CANDIDATES)
        else:
            candidates = self._recent_published(SEARCH_CANDIDATES, category)

        results = []
        needle = ingredient.lower()
        for recipe in candidates:
            if difficulty and recipe.difficulty != difficulty:
                continue
            if max_time and not (0 < recipe.total_time <= max_time):
                continue
            if needle and not any(needle in item.lower() for item in recipe.ingredients or []):
                continue
            results.append(recipe)
            if len(results) >= limit:
                break

        return [recipe_payload(r, self.store) for r in results]

    def _search_titles(self, text: str, category: str | None, limit: int) -> list[Recipe]:
        """Full-text title search over published recipes, best match first."""
        base = self._published()
        if category:
            base = base.filter(Recipe.category == category)

        if self.db.get_bind().dialect.name == "postgresql":
            vector = func.to_tsvector("english", Recipe.title)
            ts_query = func.plainto_tsquery("english", text)
            return (
                base.filter(vector.op("@@")(ts_query))
                .order_by(func.ts_rank(vector, ts_query).desc(), Recipe.created_at.desc())
                .limit(limit)
                .all()
            )

        # Term matching for databases without a text search index (tests, SQLite)
        terms = [t.lower() for t in text.split() if t]
        matches = (
            base.filter(
                or_(*(Recipe.title.ilike(f"%{_escape_like(t)}%", escape="\\") for t in terms))
            )
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .limit(limit)
            .all()
        )
        return sorted(matches, key=lambda r: -sum(t in r.title.lower() for t in terms))

    # --- Feed ---

    def feed(self, user_id: int, limit: int = 20) -> list[dict]:
        """
        Recent published recipes by the users this user follows.

        Fan-out on read over a bounded window of the newest published recipes
        (``limit * feed_window_multiplier``). Follows who have not posted within
        that window are missed.
        """
        limit = clamp_limit(limit, self.settings.search_max_limit)
        following = FollowService(self.db).following_ids(user_id)
        if not following:
            return []

        window = self._recent_published(limit * self.settings.feed_window_multiplier)
        recipes = [r for r in window if r.user_id in following][:limit]

        authors = load_users(self.db, {r.user_id for r in recipes})
        return [
            recipe_payload(
                r,
                self.store,
                author=user_summary(authors[r.user_id]) if r.user_id in authors else None,
            )
            for r in recipes
        ]

    # --- Analytics ---

    def record_view(self, recipe_id: int) -> None:
        """Record a page view for analytics."""
        if not self.db.query(Recipe.id).filter(Recipe.id == recipe_id).first():
            raise not_found("Recipe")
        self.db.add(RecipeView(recipe_id=recipe_id))
        self.db.commit()
