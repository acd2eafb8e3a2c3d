"""Collection model."""

from sqlalchemy import Column, ForeignKey, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin


class Collection(Base, TimestampMixin):
    """A named group of a user's bookmarks."""

    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
