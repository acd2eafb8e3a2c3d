"""Recipe model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import RecipeStatus
from src.models.mixins import TimestampMixin


class Recipe(Base, TimestampMixin):
    """A user-authored recipe, either a private draft or published."""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    ingredients = Column(JSON, nullable=False, default=list)  # ["2 cups flour", ...]
    steps = Column(JSON, nullable=False, default=list)
    cover_image = Column(String(512), nullable=True)  # blob store key
    video_url = Column(String(1024), nullable=True)
    status = Column(String(20), nullable=False, default=RecipeStatus.DRAFT.value, index=True)
    publish_at = Column(DateTime(timezone=True), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    forked_from_id = Column(Integer, ForeignKey("recipes.id"), nullable=True)
    servings = Column(Integer, nullable=True)
    prep_time = Column(Integer, nullable=True)  # minutes
    cook_time = Column(Integer, nullable=True)  # minutes
    difficulty = Column(String(10), nullable=True)

    # Relationships
    user = relationship("User", backref="recipes")

    __table_args__ = (
        Index("ix_recipes_status_created", "status", "created_at"),
        Index("ix_recipes_category_status_created", "category", "status", "created_at"),
    )

    @property
    def is_published(self) -> bool:
        """Check if the recipe is publicly visible."""
        return self.status == RecipeStatus.PUBLISHED.value

    @property
    def total_time(self) -> int:
        """Prep plus cook time in minutes (0 when neither is set)."""
        return (self.prep_time or 0) + (self.cook_time or 0)
