"""Notification endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_current_user, get_notification_service
from src.models.user import User
from src.schemas.common import SuccessResponse
from src.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from src.services.notification_service import NotificationService

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """Get the current user's notifications, newest first."""
    return service.list_for_user(current_user.id, limit=limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    return {"count": service.unread_count(current_user.id)}


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark every unread notification as read."""
    return {"updated": service.mark_all_read(current_user.id)}


@router.post("/{notification_id}/read", response_model=SuccessResponse)
async def mark_read(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark one notification as read. Other users' notifications are left alone."""
    return {"success": service.mark_read(current_user.id, notification_id)}
