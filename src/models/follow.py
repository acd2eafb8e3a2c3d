"""Follow model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint

from src.database import Base
from src.models.mixins import TimestampMixin


class Follow(Base, TimestampMixin):
    """Directed follow edge: follower_id follows following_id."""

    __tablename__ = "follows"

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )
