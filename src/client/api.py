"""HTTP client for the Mise API with optimistic social actions."""

import logging

import httpx

from src.client.optimistic import OptimisticToggle

logger = logging.getLogger(__name__)


class MiseClient:
    """Thin wrapper over the REST API.

    Args:
        base_url: API origin, e.g. "https://mise.example.com"
        token: Bearer token from login/register
        http: Preconfigured httpx.Client (base_url is ignored when given)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs):
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def close(self) -> None:
        self.http.close()

    # --- Auth ---

    def login(self, email: str, password: str) -> dict:
        data = self._request(
            "POST", "/api/v1/auth/login", json={"email": email, "password": password}
        )
        self.token = data["access_token"]
        return data["user"]

    # --- Recipes and discovery ---

    def get_recipe(self, slug: str) -> dict:
        return self._request("GET", f"/api/v1/recipes/by-slug/{slug}")

    def import_recipe(self, url: str) -> dict:
        return self._request("POST", "/api/v1/recipes/import", json={"url": url})

    def trending(self, limit: int = 10) -> list[dict]:
        return self._request("GET", "/api/v1/discover/trending", params={"limit": limit})

    def recommendations(self, limit: int = 10) -> list[dict]:
        return self._request("GET", "/api/v1/discover/recommendations", params={"limit": limit})

    def search(self, query: str | None = None, **filters) -> list[dict]:
        params = {k: v for k, v in {"q": query, **filters}.items() if v is not None}
        return self._request("GET", "/api/v1/discover/search", params=params)

    def feed(self, limit: int = 20) -> list[dict]:
        return self._request("GET", "/api/v1/discover/feed", params={"limit": limit})

    # --- Social actions ---

    def toggle_like(self, recipe_id: int) -> dict:
        return self._request("POST", f"/api/v1/recipes/{recipe_id}/like")

    def toggle_bookmark(self, recipe_id: int, collection_id: int | None = None) -> dict:
        return self._request(
            "POST", f"/api/v1/recipes/{recipe_id}/bookmark", json={"collection_id": collection_id}
        )

    def rate(self, recipe_id: int, value: int) -> dict:
        return self._request("POST", f"/api/v1/recipes/{recipe_id}/rating", json={"value": value})

    def rating_stats(self, recipe_id: int) -> dict:
        return self._request("GET", f"/api/v1/recipes/{recipe_id}/rating")

    def toggle_follow(self, user_id: int) -> dict:
        return self._request("POST", f"/api/v1/users/{user_id}/follow")

    # --- Optimistic variants ---

    def like(self, recipe_id: int, toggle: OptimisticToggle) -> bool:
        """Flip ``toggle`` now and reconcile with the server's like state.

        Returns False when a newer flip superseded this one. Request failures
        roll the toggle back and are re-raised.
        """
        seq = toggle.flip()
        try:
            result = self.toggle_like(recipe_id)
        except httpx.HTTPError:
            toggle.fail(seq)
            logger.warning(f"Like on recipe {recipe_id} failed; rolled back")
            raise
        return toggle.resolve(seq, result["liked"], result["likes_count"])

    def bookmark(
        self, recipe_id: int, toggle: OptimisticToggle, collection_id: int | None = None
    ) -> bool:
        seq = toggle.flip()
        try:
            result = self.toggle_bookmark(recipe_id, collection_id)
        except httpx.HTTPError:
            toggle.fail(seq)
            logger.warning(f"Bookmark on recipe {recipe_id} failed; rolled back")
            raise
        return toggle.resolve(seq, result["bookmarked"])

    def rate_optimistic(self, recipe_id: int, value: int, toggle: OptimisticToggle) -> bool:
        """Show ``value`` as the user's rating now; the server's stats settle it."""
        seq = toggle.begin(value)
        try:
            self.rate(recipe_id, value)
            stats = self.rating_stats(recipe_id)
        except httpx.HTTPError:
            toggle.fail(seq)
            logger.warning(f"Rating on recipe {recipe_id} failed; rolled back")
            raise
        return toggle.resolve(seq, stats["user_rating"], stats["count"])

    # --- Notifications and presence ---

    def notifications(self, limit: int = 20) -> list[dict]:
        return self._request("GET", "/api/v1/notifications", params={"limit": limit})

    def unread_count(self) -> int:
        return self._request("GET", "/api/v1/notifications/unread-count")["count"]

    def mark_all_read(self) -> int:
        return self._request("POST", "/api/v1/notifications/read-all")["updated"]

    def heartbeat(self, recipe_id: int) -> None:
        self._request("POST", f"/api/v1/recipes/{recipe_id}/presence")

    def cooking(self, recipe_id: int) -> dict:
        return self._request("GET", f"/api/v1/recipes/{recipe_id}/cooking")
