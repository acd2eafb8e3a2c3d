"""Enums for model fields."""

from enum import Enum


class RecipeStatus(str, Enum):
    """Publication state of a recipe."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Difficulty(str, Enum):
    """Self-reported recipe difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class NotificationType(str, Enum):
    """Kinds of social events recorded in the notification ledger."""

    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    FORK = "fork"

    def needs_recipe(self) -> bool:
        """Check if this notification type refers to a recipe."""
        return self != NotificationType.FOLLOW
