from __future__ import annotations
import asyncio
import uuid
from fastapi import APIRouter, Depends, Query, Request
from sse_starlette.sse import EventSourceResponse
import structlog

from evolvefit.config import settings
from evolvefit.deps import get_broadcaster
from evolvefit.realtime.broadcaster import Broadcaster
from evolvefit.schemas.realtime import BroadcastMessage, BufferResponse

log = structlog.get_logger()

router = APIRouter(prefix="/realtime", tags=["realtime"])


@router.get("/buffer", response_model=BufferResponse)
async def buffer(
    channel: str = Query(..., min_length=1, description="Substring matched against message type"),
    bus: Broadcaster = Depends(get_broadcaster),
):
    messages = bus.get_buffer(channel)
    return BufferResponse(channel=channel, count=len(messages), messages=messages)


@router.get("/{channel}/stream")
async def stream(channel: str, request: Request, bus: Broadcaster = Depends(get_broadcaster)):
    """Server-sent events for one broadcast channel; heartbeats keep idle proxies open."""
    client_id = str(uuid.uuid4())
    queue: asyncio.Queue[BroadcastMessage] = asyncio.Queue(maxsize=100)

    def _enqueue(message: BroadcastMessage) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            log.warning("sse_dropped", client_id=client_id, channel=channel, reason="queue_full")

    sub = bus.subscribe(channel, _enqueue)
    log.info("sse_connect", client_id=client_id, channel=channel)

    async def events():
        try:
            while not await request.is_disconnected():
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=settings.sse_heartbeat_seconds)
                except asyncio.TimeoutError:
                    yield {"event": "heartbeat", "data": "{}"}
                    continue
                yield {"event": message.type, "data": message.model_dump_json()}
        finally:
            sub.unsubscribe()
            log.info("sse_disconnect", client_id=client_id, channel=channel)

    return EventSourceResponse(events())
