"""Bookmark model."""

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Bookmark(Base, TimestampMixin):
    """A saved recipe, optionally filed into one of the user's collections."""

    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # NULL means "uncategorized"
    collection_id = Column(Integer, ForeignKey("collections.id"), nullable=True, index=True)

    # Relationships
    recipe = relationship("Recipe")

    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_bookmark_user_recipe"),)
