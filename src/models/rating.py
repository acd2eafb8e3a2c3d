"""Rating model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin


class Rating(Base, TimestampMixin):
    """A 1-5 star rating. One per user and recipe; re-rating replaces the value."""

    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    value = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_rating_user_recipe"),
        CheckConstraint("value BETWEEN 1 AND 5", name="ck_rating_value_range"),
    )
