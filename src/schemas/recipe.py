"""Recipe schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.enums import Difficulty, RecipeStatus
from src.schemas.common import EpochMillis, UserSummary


class RecipeCreate(BaseModel):
    """Create a new recipe."""

    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str = Field(..., min_length=1, max_length=100)
    ingredients: list[str] = []
    steps: list[str] = []
    cover_image: str | None = Field(None, max_length=512)
    video_url: str | None = Field(None, max_length=1024)
    status: RecipeStatus = RecipeStatus.DRAFT
    publish_at: datetime | None = None  # accepts epoch ms
    servings: int | None = Field(None, ge=1)
    prep_time: int | None = Field(None, ge=0)
    cook_time: int | None = Field(None, ge=0)
    difficulty: Difficulty | None = None


class RecipeUpdate(BaseModel):
    """Update a recipe. Only fields that are sent are changed."""

    model_config = ConfigDict(use_enum_values=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=100)
    ingredients: list[str] | None = None
    steps: list[str] | None = None
    cover_image: str | None = Field(None, max_length=512)
    video_url: str | None = Field(None, max_length=1024)
    status: RecipeStatus | None = None
    publish_at: datetime | None = None
    servings: int | None = Field(None, ge=1)
    prep_time: int | None = Field(None, ge=0)
    cook_time: int | None = Field(None, ge=0)
    difficulty: Difficulty | None = None

    @field_validator("title", "category", "ingredients", "steps", "status")
    @classmethod
    def reject_null(cls, value):
        """These may be omitted but not cleared."""
        if value is None:
            raise ValueError("cannot be null")
        return value


class RecipeResponse(BaseModel):
    """Recipe with its resolved cover image URL."""

    id: int
    slug: str
    title: str
    description: str | None
    category: str
    ingredients: list[str]
    steps: list[str]
    cover_image: str | None
    cover_image_url: str | None
    video_url: str | None
    status: str
    publish_at: EpochMillis | None
    user_id: int
    forked_from_id: int | None
    servings: int | None
    prep_time: int | None
    cook_time: int | None
    difficulty: str | None
    created_at: EpochMillis
    updated_at: EpochMillis


class RecipeDetailResponse(RecipeResponse):
    """Recipe page: author plus the viewer's like/bookmark state."""

    author: UserSummary | None
    likes_count: int
    is_liked: bool
    is_bookmarked: bool


class TrendingRecipeResponse(RecipeResponse):
    trending_score: int


class FeedRecipeResponse(RecipeResponse):
    author: UserSummary | None


class BookmarkedRecipeResponse(RecipeResponse):
    bookmark_id: int
    collection_id: int | None = None


class RecipePage(BaseModel):
    """One page of a cursor-paginated recipe listing."""

    items: list[RecipeResponse]
    next_cursor: str | None
    is_done: bool


class UploadUrlResponse(BaseModel):
    upload_url: str
    blob_id: str


class RecipeImportRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)


class RecipeImportResponse(BaseModel):
    """Fields extracted from a recipe page, used to prefill the editor."""

    title: str
    description: str
    ingredients: list[str]
    steps: list[str]
    prep_time: int | None = None
    cook_time: int | None = None
    servings: int | None = None
    image_url: str | None = None
    source: str
