"""WebSocket endpoints for live notifications and recipe page updates."""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from src.database import SessionLocal
from src.models.recipe import Recipe
from src.models.user import User
from src.services.auth import decode_access_token
from src.services.realtime import RealtimeService, recipe_channel, user_channel

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])

PING_INTERVAL_SECONDS = 30


def _authenticate(db, token: str | None) -> User | None:
    if not token:
        return None
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    return db.query(User).filter(User.id == int(payload["sub"])).first()


async def _relay(websocket: WebSocket, realtime_service: RealtimeService, channel: str) -> None:
    """Forward pub/sub messages on a channel to the socket until either side closes."""

    async def handle_messages() -> None:
        async for message in realtime_service.subscribe(channel):
            try:
                await websocket.send_json(message)
            except WebSocketDisconnect:
                break
            except Exception as e:
                logger.error(f"Error sending WebSocket message: {e}")
                break

    async def handle_ping() -> None:
        while True:
            try:
                await asyncio.sleep(PING_INTERVAL_SECONDS)
                await websocket.send_json({"type": "ping"})
            except Exception:
                break

    async def handle_client() -> None:
        while True:
            try:
                data = await websocket.receive_json()
                if data.get("type") == "pong":
                    continue
            except WebSocketDisconnect:
                break
            except Exception:
                break

    await asyncio.gather(
        handle_messages(),
        handle_ping(),
        handle_client(),
        return_exceptions=True,
    )


@router.websocket("/me")
async def websocket_user_events(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    """Stream the caller's notification events.

    Authentication via token query parameter (WebSocket doesn't support headers).
    """
    db = SessionLocal()
    realtime_service = RealtimeService()
    user_id: int | None = None

    try:
        user = _authenticate(db, token)
        if user is None:
            await websocket.close(code=4001, reason="Invalid token")
            return
        user_id = user.id

        await websocket.accept()
        logger.info(f"WebSocket connected: user={user_id}")
        await _relay(websocket, realtime_service, user_channel(user_id))

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: user={user_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        db.close()
        await realtime_service.cleanup()


@router.websocket("/recipes/{recipe_id}")
async def websocket_recipe_events(
    websocket: WebSocket,
    recipe_id: int,
    token: str | None = Query(None),
) -> None:
    """Stream like, comment and presence changes for a recipe page.

    Anonymous viewers may watch published recipes; drafts need the owner's token.
    """
    db = SessionLocal()
    realtime_service = RealtimeService()

    try:
        user = _authenticate(db, token)
        recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
        if recipe is None or (
            not recipe.is_published and (user is None or user.id != recipe.user_id)
        ):
            await websocket.close(code=4004, reason="Recipe not found")
            return

        await websocket.accept()
        logger.info(f"WebSocket connected: recipe={recipe_id}")
        await _relay(websocket, realtime_service, recipe_channel(recipe_id))

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: recipe={recipe_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        db.close()
        await realtime_service.cleanup()
