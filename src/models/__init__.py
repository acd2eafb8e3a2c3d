"""SQLAlchemy models."""

from src.models.bookmark import Bookmark
from src.models.collection import Collection
from src.models.comment import Comment
from src.models.follow import Follow
from src.models.like import Like
from src.models.notification import Notification
from src.models.presence import Presence
from src.models.rating import Rating
from src.models.recipe import Recipe
from src.models.recipe_view import RecipeView
from src.models.user import User

__all__ = [
    "User",
    "Recipe",
    "Like",
    "Bookmark",
    "Comment",
    "Rating",
    "Follow",
    "Notification",
    "Collection",
    "RecipeView",
    "Presence",
]
