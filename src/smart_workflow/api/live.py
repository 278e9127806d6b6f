"""Live-update WebSocket endpoint.

No authentication: any client that connects receives every lifecycle
event. Messages sent by clients are read only to notice disconnects.
"""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket

from smart_workflow.dependencies import get_manager
from smart_workflow.manager import WorkflowManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    manager: Annotated[WorkflowManager, Depends(get_manager)],
) -> None:
    await websocket.accept()
    manager.registry.add(websocket)
    logger.info("Live client connected (%d open)", len(manager.registry))
    try:
        while True:
            # text and binary frames are both ignored
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Live client disconnected code=%s", message.get("code"))
                break
            payload = message.get("text") or message.get("bytes") or ""
            logger.debug("Live client sent %r", payload[:200])
    finally:
        manager.registry.discard(websocket)


__all__ = ["router"]
