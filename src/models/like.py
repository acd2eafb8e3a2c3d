"""Like model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin


class Like(Base, TimestampMixin):
    """A user's like on a published recipe."""

    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_like_user_recipe"),
        Index("ix_likes_created_at", "created_at"),
    )
