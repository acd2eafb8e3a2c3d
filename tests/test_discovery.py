"""Discovery engine tests: trending, recommendations and search."""

from datetime import UTC, datetime, timedelta

from src.models import Like, User
from src.services.discovery_service import DiscoveryService


def _likers(db, count: int, prefix: str = "liker") -> list[User]:
    users = [
        User(email=f"{prefix}{i}@example.com", password_hash="x", name=f"{prefix} {i}")
        for i in range(count)
    ]
    db.add_all(users)
    db.commit()
    return users


def _like(db, users, recipe_id: int, at: datetime) -> None:
    db.add_all(Like(user_id=u.id, recipe_id=recipe_id, created_at=at) for u in users)
    db.commit()


class TestTrending:
    """Trending over the trailing seven-day window."""

    def test_window_ties_and_drafts(self, db, auth_headers, create_recipe, blob_store):
        now = datetime.now(UTC)
        first = create_recipe(auth_headers, title="First")
        stale = create_recipe(auth_headers, title="Stale")
        second = create_recipe(auth_headers, title="Second")
        draft = create_recipe(auth_headers, title="Draft", status="draft")
        likers = _likers(db, 10)

        _like(db, likers[:3], first["id"], now - timedelta(days=6))
        _like(db, likers[:5], stale["id"], now - timedelta(days=8))
        _like(db, likers[3:6], second["id"], now - timedelta(hours=1))
        _like(db, likers, draft["id"], now - timedelta(days=1))

        trending = DiscoveryService(db, blob_store).trending(limit=10, now=now)

        assert [r["title"] for r in trending] == ["First", "Second"]
        assert [r["trending_score"] for r in trending] == [3, 3]

    def test_limit_applies_before_draft_filter(self, db, auth_headers, create_recipe, blob_store):
        now = datetime.now(UTC)
        draft = create_recipe(auth_headers, title="Draft", status="draft")
        published = create_recipe(auth_headers, title="Published")
        likers = _likers(db, 3)
        _like(db, likers, draft["id"], now - timedelta(days=1))
        _like(db, likers[:1], published["id"], now - timedelta(days=1))

        trending = DiscoveryService(db, blob_store).trending(limit=1, now=now)
        assert trending == []

    def test_no_likes(self, db, blob_store):
        assert DiscoveryService(db, blob_store).trending() == []

    def test_endpoint(self, client, auth_headers, other_headers, create_recipe):
        recipe = create_recipe(auth_headers)
        client.post(f"/api/v1/recipes/{recipe['id']}/like", headers=other_headers)

        response = client.get("/api/v1/discover/trending")
        assert response.status_code == 200
        data = response.json()
        assert data[0]["id"] == recipe["id"]
        assert data[0]["trending_score"] == 1

    def test_custom_source(self, db, auth_headers, create_recipe, blob_store):
        recipe = create_recipe(auth_headers)

        class FixedSource:
            def top(self, since, limit):
                return [(recipe["id"], 42)]

        trending = DiscoveryService(db, blob_store, trending_source=FixedSource()).trending()
        assert trending[0]["trending_score"] == 42


class TestRecommendations:
    """Category-based recommendations."""

    def test_from_liked_categories(
        self, client, auth_headers, other_headers, register, create_recipe
    ):
        chef = register("chef")
        liked = create_recipe(chef, title="Liked Tart", category="dessert")
        create_recipe(chef, title="Brownies", category="dessert")
        create_recipe(chef, title="Stew", category="dinner")
        create_recipe(other_headers, title="Own Cake", category="dessert")
        create_recipe(chef, title="Draft Pie", category="dessert", status="draft")

        client.post(f"/api/v1/recipes/{liked['id']}/like", headers=other_headers)

        response = client.get("/api/v1/discover/recommendations", headers=other_headers)
        assert response.status_code == 200
        assert [r["title"] for r in response.json()] == ["Brownies"]

    def test_anonymous_gets_recent(self, client, auth_headers, create_recipe):
        create_recipe(auth_headers, title="Older")
        create_recipe(auth_headers, title="Newer")

        data = client.get("/api/v1/discover/recommendations", params={"limit": 1}).json()
        assert [r["title"] for r in data] == ["Newer"]

    def test_user_without_likes_gets_recent(
        self, client, auth_headers, other_headers, create_recipe
    ):
        create_recipe(auth_headers, title="Only")
        data = client.get("/api/v1/discover/recommendations", headers=other_headers).json()
        assert [r["title"] for r in data] == ["Only"]

    def test_categories_follow_most_recent_likes(
        self, db, auth_headers, register, create_recipe, blob_store
    ):
        chef = register("chef")
        soup = create_recipe(chef, title="Soup Liked", category="soup")
        cake = create_recipe(chef, title="Cake Liked", category="dessert")
        create_recipe(chef, title="Other Soup", category="soup")
        create_recipe(chef, title="Other Cake", category="dessert")

        now = datetime.now(UTC)
        user_id = auth_headers.user_id
        db.add(Like(user_id=user_id, recipe_id=soup["id"], created_at=now - timedelta(days=2)))
        db.add(Like(user_id=user_id, recipe_id=cake["id"], created_at=now))
        db.commit()

        picks = DiscoveryService(db, blob_store).recommendations(auth_headers.user_id)
        assert [r["title"] for r in picks] == ["Other Cake", "Other Soup"]


class TestSearch:
    """Multi-criterion search."""

    def _seed(self, create_recipe, headers):
        create_recipe(
            headers,
            title="Lemon Tart",
            category="dessert",
            ingredients=["3 lemons", "flour"],
            difficulty="medium",
            prep_time=20,
            cook_time=40,
        )
        create_recipe(
            headers,
            title="Lemon Chicken",
            category="dinner",
            ingredients=["1 whole chicken", "2 lemons"],
            difficulty="easy",
            prep_time=10,
            cook_time=15,
        )
        create_recipe(
            headers,
            title="Chocolate Cake",
            category="dessert",
            ingredients=["cocoa", "Flour"],
            difficulty="hard",
            prep_time=None,
            cook_time=None,
        )
        create_recipe(headers, title="Lemon Draft", status="draft")

    def _titles(self, client, **params):
        response = client.get("/api/v1/discover/search", params=params)
        assert response.status_code == 200
        return [r["title"] for r in response.json()]

    def test_title_query(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert sorted(self._titles(client, q="lemon")) == ["Lemon Chicken", "Lemon Tart"]

    def test_best_match_first(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert self._titles(client, q="lemon tart")[0] == "Lemon Tart"

    def test_query_with_category(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert self._titles(client, q="lemon", category="dinner") == ["Lemon Chicken"]

    def test_category_only(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert sorted(self._titles(client, category="dessert")) == ["Chocolate Cake", "Lemon Tart"]

    def test_difficulty(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert self._titles(client, difficulty="hard") == ["Chocolate Cake"]

    def test_max_time_excludes_untimed(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert self._titles(client, max_time=30) == ["Lemon Chicken"]
        assert sorted(self._titles(client, max_time=60)) == ["Lemon Chicken", "Lemon Tart"]

    def test_ingredient_case_insensitive(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert sorted(self._titles(client, ingredient="FLOUR")) == ["Chocolate Cake", "Lemon Tart"]

    def test_combined_filters(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        titles = self._titles(
            client, q="lemon", ingredient="chicken", difficulty="easy", max_time=25
        )
        assert titles == ["Lemon Chicken"]

    def test_blank_query_lists_published(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert len(self._titles(client, q="   ")) == 3

    def test_wildcards_are_literal(self, client, auth_headers, create_recipe):
        self._seed(create_recipe, auth_headers)
        assert self._titles(client, q="%") == []

    def test_limit_is_clamped(self, db, auth_headers, create_recipe, blob_store):
        self._seed(create_recipe, auth_headers)
        service = DiscoveryService(db, blob_store)
        assert len(service.search(limit=0)) == 1
        assert len(service.search(limit=1000)) == 3

    def test_invalid_difficulty(self, client):
        response = client.get("/api/v1/discover/search", params={"difficulty": "impossible"})
        assert response.status_code == 422
