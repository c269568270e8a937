"""Server-Sent Events stream of live notifications."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, Request
from starlette.responses import StreamingResponse

from solar_automation.notify.events import StateUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15.0


@router.get("/events")
async def event_stream(request: Request) -> StreamingResponse:
    """Stream every notification event as an SSE ``data:`` line.

    The stream opens with the current state so a new observer does not
    wait for the next telemetry frame.
    """
    hub = request.app.state.hub
    state_store = request.app.state.state_store
    queue = hub.subscribe()

    async def generate():
        try:
            yield f"data: {json.dumps(StateUpdate(state=state_store.snapshot()).to_dict())}\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"data: {json.dumps(event, default=str)}\n\n"
        finally:
            hub.unsubscribe(queue)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
