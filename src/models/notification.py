"""Notification model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin


class Notification(Base, TimestampMixin):
    """An entry in a user's append-only social event ledger."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # recipient
    type = Column(String(20), nullable=False)  # like, comment, follow, fork
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=True)
    read = Column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read"),)
