"""Tests for importing recipes from web pages."""

import json

import httpx
import pytest

from src.api.dependencies import get_recipe_importer
from src.main import app
from src.services.recipe_import import (
    USER_AGENT,
    RecipeImporter,
    extract_recipe,
    parse_duration,
    parse_servings,
)

PAGE_URL = "https://cooking.example.com/lemon-tart"


def page(*blocks) -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{b if isinstance(b, str) else json.dumps(b)}</script>'
        for b in blocks
    )
    return f"<html><head>{scripts}</head><body>Lemon tart</body></html>"


LEMON_TART = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Lemon Tart",
    "description": "Sharp and sweet",
    "recipeIngredient": [" 3 lemons ", "200g flour"],
    "recipeInstructions": [
        {"@type": "HowToStep", "text": " Make the crust "},
        "Fill and bake",
        {"@type": "HowToStep", "text": "  "},
    ],
    "prepTime": "PT20M",
    "cookTime": "PT1H5M",
    "recipeYield": "8 slices",
    "image": {"@type": "ImageObject", "url": "https://cooking.example.com/tart.jpg"},
}


@pytest.fixture
def serve(client):
    """Route the importer's HTTP traffic to a canned handler."""
    requests = []

    def _serve(handler):
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(record)
        app.dependency_overrides[get_recipe_importer] = lambda: RecipeImporter(transport)
        return requests

    return _serve


class TestParsing:
    """Extraction of schema.org markup."""

    def test_extracts_recipe_fields(self):
        recipe = extract_recipe(page(LEMON_TART), PAGE_URL)
        assert recipe == {
            "title": "Lemon Tart",
            "description": "Sharp and sweet",
            "ingredients": ["3 lemons", "200g flour"],
            "steps": ["Make the crust", "Fill and bake"],
            "prep_time": 20,
            "cook_time": 65,
            "servings": 8,
            "image_url": "https://cooking.example.com/tart.jpg",
            "source": PAGE_URL,
        }

    def test_skips_invalid_and_unrelated_blocks(self):
        organization = {"@type": "Organization", "name": "Cooking"}
        recipe = extract_recipe(page("{not json", organization, LEMON_TART), PAGE_URL)
        assert recipe["title"] == "Lemon Tart"

    def test_finds_recipe_in_list_and_graph(self):
        listed = [{"@type": "WebPage"}, {"@type": ["Recipe", "NewsArticle"], "name": "Listed"}]
        graph = {"@graph": [{"@type": "WebSite"}, {"@type": "Recipe", "name": "Graphed"}]}

        assert extract_recipe(page(listed), PAGE_URL)["title"] == "Listed"
        assert extract_recipe(page(graph), PAGE_URL)["title"] == "Graphed"

    def test_missing_fields_default(self):
        recipe = extract_recipe(page({"@type": "Recipe", "image": ["a.jpg", "b.jpg"]}), PAGE_URL)
        assert recipe["title"] == ""
        assert recipe["ingredients"] == []
        assert recipe["steps"] == []
        assert recipe["prep_time"] is None
        assert recipe["servings"] is None
        assert recipe["image_url"] == "a.jpg"

    def test_page_without_recipe(self):
        assert extract_recipe("<html><body>No markup</body></html>", PAGE_URL) is None

    @pytest.mark.parametrize(
        "value,minutes",
        [("PT45M", 45), ("PT2H", 120), ("PT1H30M", 90), ("PT0H15M", 15), ("45 minutes", None)],
    )
    def test_parse_duration(self, value, minutes):
        assert parse_duration(value) == minutes

    @pytest.mark.parametrize(
        "value,servings",
        [("4 servings", 4), (["6", "6 slices"], 6), (12, 12), ("a dozen", None), (0, None)],
    )
    def test_parse_servings(self, value, servings):
        assert parse_servings(value) == servings


class TestImportEndpoint:
    """POST /api/v1/recipes/import against a mocked site."""

    def test_import_returns_prefill(self, client, auth_headers, serve):
        requests = serve(lambda request: httpx.Response(200, text=page(LEMON_TART)))

        response = client.post(
            "/api/v1/recipes/import", headers=auth_headers, json={"url": PAGE_URL}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Lemon Tart"
        assert data["cook_time"] == 65
        assert data["source"] == PAGE_URL

        assert str(requests[0].url) == PAGE_URL
        assert requests[0].headers["User-Agent"] == USER_AGENT

    def test_import_saves_nothing(self, client, auth_headers, serve):
        serve(lambda request: httpx.Response(200, text=page(LEMON_TART)))
        client.post("/api/v1/recipes/import", headers=auth_headers, json={"url": PAGE_URL})

        mine = client.get("/api/v1/recipes/mine", headers=auth_headers).json()
        assert mine == []

    def test_requires_sign_in(self, client, serve):
        requests = serve(lambda request: httpx.Response(200, text=page(LEMON_TART)))
        response = client.post("/api/v1/recipes/import", json={"url": PAGE_URL})
        assert response.status_code == 401
        assert requests == []

    def test_rejects_non_http_url(self, client, auth_headers, serve):
        requests = serve(lambda request: httpx.Response(200))
        response = client.post(
            "/api/v1/recipes/import", headers=auth_headers, json={"url": "file:///etc/passwd"}
        )
        assert response.status_code == 400
        assert requests == []

    def test_upstream_error(self, client, auth_headers, serve):
        serve(lambda request: httpx.Response(503))
        response = client.post(
            "/api/v1/recipes/import", headers=auth_headers, json={"url": PAGE_URL}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Failed to fetch URL"

    def test_connection_error(self, client, auth_headers, serve):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        serve(refuse)
        response = client.post(
            "/api/v1/recipes/import", headers=auth_headers, json={"url": PAGE_URL}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Failed to fetch URL"

    def test_page_without_recipe(self, client, auth_headers, serve):
        serve(lambda request: httpx.Response(200, text="<html><body>Blog</body></html>"))
        response = client.post(
            "/api/v1/recipes/import", headers=auth_headers, json={"url": PAGE_URL}
        )
        assert response.status_code == 400
        assert "structured recipe data" in response.json()["detail"]

    def test_follows_redirects(self, client, auth_headers, serve):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": PAGE_URL})
            return httpx.Response(200, text=page(LEMON_TART))

        serve(handler)
        response = client.post(
            "/api/v1/recipes/import",
            headers=auth_headers,
            json={"url": "https://cooking.example.com/old"},
        )
        assert response.status_code == 200
        assert response.json()["source"] == "https://cooking.example.com/old"


@pytest.mark.asyncio
async def test_importer_directly():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=page(LEMON_TART)))
    recipe = await RecipeImporter(transport).import_from_url(f"  {PAGE_URL}  ")
    assert recipe["servings"] == 8
    assert recipe["source"] == PAGE_URL
