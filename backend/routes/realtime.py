from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from backend.application import PayrollService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

VIEWER_QUEUE_SIZE = 32


def queue_delivery(queue: asyncio.Queue[dict[str, Any]]) -> Callable[[str, dict[str, Any]], None]:
    """Subscriber that enqueues events for one viewer and drops them once its queue is full."""

    def deliver(event: str, payload: dict[str, Any]) -> None:
        try:
            queue.put_nowait({"event": event, "data": payload})
        except asyncio.QueueFull:
            logger.warning("Viewer queue full; dropping %s", event)

    return deliver


async def _forward(websocket: WebSocket, queue: asyncio.Queue[dict[str, Any]]) -> None:
    while True:
        message = await queue.get()
        try:
            await websocket.send_json(message)
        except WebSocketDisconnect:
            return
        except Exception as exc:
            logger.warning("Stopped forwarding to viewer: %s", exc)
            return


@router.websocket("/ws")
async def viewer_updates(websocket: WebSocket) -> None:
    """Stream ``dataUpdated``, ``calculationComplete`` and ``error`` events to a viewer."""
    service: PayrollService = websocket.app.state.payroll_service
    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=VIEWER_QUEUE_SIZE)

    # Subscribe before accepting so events published right after the handshake are queued.
    unsubscribe = service.broadcaster.subscribe(queue_delivery(queue))
    sender: asyncio.Task[None] | None = None
    try:
        await websocket.accept()
        sender = asyncio.create_task(_forward(websocket, queue))
        logger.info("Viewer connected (%d connected)", service.broadcaster.subscriber_count)
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        if sender is not None:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
        logger.info("Viewer disconnected (%d connected)", service.broadcaster.subscriber_count)
