"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from src.schemas.recipe import RecipeCreate, RecipeResponse, RecipeUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "RecipeCreate",
    "RecipeUpdate",
    "RecipeResponse",
]
