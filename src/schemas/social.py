"""Schemas for likes, bookmarks, ratings, comments and follows."""

from pydantic import BaseModel, Field

from src.schemas.common import EpochMillis


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int


class BookmarkToggleRequest(BaseModel):
    collection_id: int | None = None


class BookmarkToggleResponse(BaseModel):
    bookmarked: bool


class RatingCreate(BaseModel):
    """A 1-5 star rating. Whole-number and range checks are done by the service."""

    value: int | float


class RatingStatsResponse(BaseModel):
    average: float
    count: int
    user_rating: int | None


class CommentCreate(BaseModel):
    # Trimmed length (1-500) is checked by the service
    content: str = Field(..., max_length=5000)


class CommentAuthor(BaseModel):
    name: str | None
    image: str | None


class CommentResponse(BaseModel):
    id: int
    recipe_id: int
    user_id: int
    content: str
    created_at: EpochMillis
    user: CommentAuthor | None = None


class FollowToggleResponse(BaseModel):
    following: bool


class FollowCountsResponse(BaseModel):
    followers: int
    following: int
