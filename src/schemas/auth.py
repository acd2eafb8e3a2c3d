"""Authentication and profile schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

USERNAME_PATTERN = r"^[a-zA-Z0-9_]{3,30}$"


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(None, max_length=255)
    username: str | None = Field(None, pattern=USERNAME_PATTERN)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: "UserResponse"


class UserResponse(BaseModel):
    """Current user information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    username: str | None = None
    image: str | None = None
    bio: str | None = None


class ProfileUpdate(BaseModel):
    """Update the current user's public profile."""

    name: str | None = Field(None, max_length=255)
    username: str | None = Field(None, pattern=USERNAME_PATTERN)
    bio: str | None = Field(None, max_length=1000)
    image: str | None = Field(None, max_length=1024)


class PublicProfileResponse(BaseModel):
    """A user's public profile with follow counts."""

    id: int
    name: str | None
    username: str | None
    image: str | None
    bio: str | None
    followers: int
    following: int
    is_following: bool
