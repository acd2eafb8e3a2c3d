"""RecipeView model for view analytics."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer

from src.database import Base
from src.models.mixins import utcnow


class RecipeView(Base):
    """A single page view of a recipe. Purged after the retention window."""

    __tablename__ = "recipe_views"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
