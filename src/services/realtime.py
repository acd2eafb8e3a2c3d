"""Real-time push service using Redis pub/sub."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import redis
import redis.asyncio as aioredis

from src.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)
settings = get_settings()


class RealtimeEventType(StrEnum):
    """Event types pushed to connected clients."""

    # Per-user channel
    NOTIFICATION_CREATED = "notification_created"
    NOTIFICATIONS_READ = "notifications_read"

    # Per-recipe channel
    PRESENCE_CHANGED = "presence_changed"
    LIKES_CHANGED = "likes_changed"
    COMMENT_ADDED = "comment_added"


# Synchronous Redis client for use in API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from API endpoints."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def user_channel(user_id: int) -> str:
    return f"user:{user_id}"


def recipe_channel(recipe_id: int) -> str:
    return f"recipe:{recipe_id}"


def publish_event(channel: str, event_type: RealtimeEventType, data: dict | None = None) -> None:
    """Publish an event to a Redis channel.

    Called from services after their database writes are committed.
    Failures are logged and never propagate to the caller.
    """
    try:
        redis_client = get_sync_redis()
        message = {
            "type": event_type,
            "channel": channel,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": data or {},
        }
        redis_client.publish(channel, json.dumps(message))
        logger.debug(f"Published {event_type} to {channel}")
    except Exception as e:
        # Don't fail the request if pub/sub fails
        logger.error(f"Failed to publish realtime event: {e}")


def publish_user_event(
    user_id: int, event_type: RealtimeEventType, data: dict | None = None
) -> None:
    publish_event(user_channel(user_id), event_type, data)


def publish_recipe_event(
    recipe_id: int, event_type: RealtimeEventType, data: dict | None = None
) -> None:
    publish_event(recipe_channel(recipe_id), event_type, data)


class RealtimeService:
    """Async Redis pub/sub service for WebSocket connections."""

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        self._pubsub: PubSub | None = None

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(settings.redis_url)
        return self._redis

    async def subscribe(self, channel: str) -> AsyncIterator[dict]:
        """Subscribe to a Redis channel and yield messages."""
        redis_conn = await self._get_redis()
        self._pubsub = redis_conn.pubsub()
        await self._pubsub.subscribe(channel)

        try:
            async for message in self._pubsub.listen():
                if message["type"] == "message":
                    try:
                        data = json.loads(message["data"])
                        yield data
                    except json.JSONDecodeError:
                        logger.warning(f"Invalid JSON in pub/sub message: {message['data']}")
        finally:
            if self._pubsub:
                await self._pubsub.unsubscribe(channel)

    async def cleanup(self) -> None:
        """Clean up Redis connections."""
        if self._pubsub:
            await self._pubsub.close()
        if self._redis:
            await self._redis.close()
