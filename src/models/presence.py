"""Presence model for live "cooking now" tracking."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import utcnow


class Presence(Base):
    """Last heartbeat of a user on a recipe page.

    Rows older than the presence TTL are stale and ignored by readers;
    the sweep task removes them eventually.
    """

    __tablename__ = "presence"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    last_seen = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_presence_user_recipe"),)
