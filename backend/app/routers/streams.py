import asyncio
import json
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import redis.asyncio as redis

from ..config import REDIS_URL

logger = logging.getLogger(__name__)

router = APIRouter()

redis_client = redis.from_url(REDIS_URL, decode_responses=True)


def channel_for(mid: str) -> str:
    return f"match:{mid}"


async def broadcast(mid: str, message: dict) -> None:
    """Notify everyone watching ``mid`` that a state change was committed.

    Called only after the change is committed; a Redis outage is logged and
    otherwise ignored because the stored state is already authoritative.
    """
    try:
        await redis_client.publish(channel_for(mid), json.dumps(message, default=str))
    except redis.RedisError as exc:
        logger.warning("Could not broadcast update for match %s: %s", mid, exc)


@router.websocket("/matches/{mid}/stream")
async def match_stream(ws: WebSocket, mid: str) -> None:
    """Stream match updates via a Redis pub/sub channel."""
    await ws.accept()
    try:
        async with redis_client.pubsub() as pubsub:
            await pubsub.subscribe(channel_for(mid))

            async def sender() -> None:
                try:
                    async for msg in pubsub.listen():
                        if msg.get("type") == "message":
                            await ws.send_json(json.loads(msg["data"]))
                except redis.ConnectionError:
                    await ws.close()

            send_task = asyncio.create_task(sender())
            try:
                while True:
                    await ws.receive_text()
            except WebSocketDisconnect:
                pass
            finally:
                send_task.cancel()
                with suppress(asyncio.CancelledError):
                    await send_task
                await pubsub.unsubscribe(channel_for(mid))
    except redis.ConnectionError:
        await ws.close()
