"""Collection schemas."""

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.common import EpochMillis


class CollectionCreate(BaseModel):
    # Trimmed length (1-50) is checked by the service
    name: str = Field(..., max_length=200)


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: EpochMillis
    count: int = 0


class MoveBookmarkRequest(BaseModel):
    collection_id: int | None = None


class BookmarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_id: int
    collection_id: int | None
