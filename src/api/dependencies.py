"""FastAPI dependencies for authentication, storage and services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.auth import decode_access_token
from src.services.collection_service import CollectionService
from src.services.discovery_service import DiscoveryService
from src.services.follow_service import FollowService
from src.services.notification_service import NotificationService
from src.services.presence_service import PresenceService
from src.services.recipe_import import RecipeImporter
from src.services.recipe_service import RecipeService
from src.services.social_service import SocialService
from src.services.storage import BlobStore, S3BlobStore

# auto_error=False so anonymous requests reach get_optional_user
security = HTTPBearer(auto_error=False)

SIGN_IN_REQUIRED = "Please sign in"


def _user_from_token(db: Session, token: str) -> User | None:
    payload = decode_access_token(token)
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    return db.query(User).filter(User.id == int(user_id)).first()


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Get the caller if a valid token was sent, else None."""
    if credentials is None:
        return None
    return _user_from_token(db, credentials.credentials)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SIGN_IN_REQUIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = _user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SIGN_IN_REQUIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


@lru_cache
def get_blob_store() -> BlobStore:
    """Get the process-wide blob store client."""
    return S3BlobStore()


def get_recipe_service(
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
) -> RecipeService:
    """Get recipe service with dependencies."""
    return RecipeService(db, store)


def get_recipe_importer() -> RecipeImporter:
    return RecipeImporter()


def get_social_service(db: Annotated[Session, Depends(get_db)]) -> SocialService:
    return SocialService(db)


def get_follow_service(db: Annotated[Session, Depends(get_db)]) -> FollowService:
    return FollowService(db)


def get_notification_service(db: Annotated[Session, Depends(get_db)]) -> NotificationService:
    return NotificationService(db)


def get_presence_service(db: Annotated[Session, Depends(get_db)]) -> PresenceService:
    return PresenceService(db)


def get_discovery_service(
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
) -> DiscoveryService:
    """Get discovery service with dependencies."""
    return DiscoveryService(db, store)


def get_collection_service(
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[BlobStore, Depends(get_blob_store)],
) -> CollectionService:
    return CollectionService(db, store)
