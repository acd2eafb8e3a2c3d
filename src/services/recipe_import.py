"""Import a recipe from a web page's schema.org JSON-LD markup."""

import json
import logging
import re

import httpx
from fastapi import HTTPException, status

from src.config import get_settings

logger = logging.getLogger(__name__)

USER_AGENT = "Mise Recipe Importer"

JSON_LD_PATTERN = re.compile(
    r"<script[^>]*type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)
DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?")
LEADING_INT_PATTERN = re.compile(r"\s*(\d+)")

FETCH_FAILED = "Failed to fetch URL"
NO_RECIPE_FOUND = "Could not extract recipe from URL. Try a site with structured recipe data."


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def parse_duration(value) -> int | None:
    """ISO 8601 duration ("PT1H30M") to minutes; None when absent or unparseable."""
    if not value or not isinstance(value, str):
        return None
    match = DURATION_PATTERN.search(value)
    if not match:
        return None
    hours, minutes = match.groups()
    return int(hours or 0) * 60 + int(minutes or 0)


def parse_servings(value) -> int | None:
    """Leading integer of recipeYield ("4 servings", ["4", "4 servings"], 6)."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value) or None
    if isinstance(value, str):
        match = LEADING_INT_PATTERN.match(value)
        if match:
            return int(match.group(1)) or None
    return None


def parse_image(value) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("url")
    return None


def _is_recipe(node) -> bool:
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def _find_recipe(data) -> dict | None:
    if isinstance(data, list):
        candidates = data
    elif isinstance(data, dict) and isinstance(data.get("@graph"), list):
        candidates = data["@graph"]
    else:
        candidates = [data]
    return next((node for node in candidates if _is_recipe(node)), None)


def _steps(instructions) -> list[str]:
    if isinstance(instructions, str):
        instructions = [instructions]
    steps = []
    for step in instructions or []:
        text = step if isinstance(step, str) else (step or {}).get("text") or ""
        if isinstance(text, str) and text.strip():
            steps.append(text.strip())
    return steps


def extract_recipe(html: str, source: str) -> dict | None:
    """
    Pull the first schema.org Recipe out of the page's JSON-LD blocks.

    Blocks that are not valid JSON are skipped.

    Returns:
        Recipe fields ready to prefill the editor, or None when the page has none
    """
    for block in JSON_LD_PATTERN.findall(html):
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            logger.debug(f"Skipping invalid JSON-LD block on {source}")
            continue

        recipe = _find_recipe(data)
        if recipe is None:
            continue

        return {
            "title": recipe.get("name") or "",
            "description": recipe.get("description") or "",
            "ingredients": [
                i.strip() for i in recipe.get("recipeIngredient") or [] if isinstance(i, str)
            ],
            "steps": _steps(recipe.get("recipeInstructions")),
            "prep_time": parse_duration(recipe.get("prepTime")),
            "cook_time": parse_duration(recipe.get("cookTime")),
            "servings": parse_servings(recipe.get("recipeYield")),
            "image_url": parse_image(recipe.get("image")),
            "source": source,
        }
    return None


class RecipeImporter:
    """Fetches recipe pages over HTTP and extracts their structured data."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = get_settings()
        self.transport = transport

    async def import_from_url(self, url: str) -> dict:
        """
        Fetch ``url`` and return the recipe it describes. Nothing is saved.

        Raises:
            HTTPException 400: bad URL, fetch failure or no recipe markup
        """
        url = url.strip()
        if not url.lower().startswith(("http://", "https://")):
            raise _bad_request("URL must start with http:// or https://")

        async with httpx.AsyncClient(
            timeout=self.settings.import_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(f"Recipe import fetch failed for {url}: {e}")
                raise _bad_request(FETCH_FAILED) from e

        if len(response.content) > self.settings.import_max_bytes:
            raise _bad_request(FETCH_FAILED)

        recipe = extract_recipe(response.text, url)
        if recipe is None:
            raise _bad_request(NO_RECIPE_FOUND)

        logger.info(f"Imported recipe '{recipe['title']}' from {url}")
        return recipe
