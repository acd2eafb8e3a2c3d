"""Comment model."""

from sqlalchemy import Column, ForeignKey, Integer, Text

from src.database import Base
from src.models.mixins import TimestampMixin


class Comment(Base, TimestampMixin):
    """A comment on a published recipe. Content is stored HTML-escaped."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
