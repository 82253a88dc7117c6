"""
WebSocket stream of session events.

Each connected client first receives a status snapshot, then every session
topic and tick published on the EventBus:

    {"topic": "session:start", "data": {"duration_ms": 600000, "scene": "rain"}}
    {"topic": "timer:tick", "data": {"remaining_ms": 599750, ...}}
"""

import asyncio
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from stillpoint.api.schemas.session import SessionStatusResponse
from stillpoint.models.enums import LogCategory
from stillpoint.models.events import Event, EventType
from stillpoint.services.service_container import ServiceContainer
from stillpoint.utils.logger import get_category_logger

log = get_category_logger(LogCategory.WEBSOCKET)

STREAMED_TOPICS = (
    EventType.SESSION_START,
    EventType.SESSION_PAUSE,
    EventType.SESSION_RESUME,
    EventType.SESSION_STOP,
    EventType.SESSION_COMPLETE,
    EventType.SESSION_MUTE,
    EventType.SESSION_DISMISS_PROMPT,
    EventType.TIMER_TICK,
)

# Per-client backlog; ticks are dropped first when a client falls behind
QUEUE_LIMIT = 64


def event_message(event: Event) -> Dict[str, Any]:
    data = {
        k: (v.value if isinstance(v, Enum) else v)
        for k, v in event.to_data().items()
    }
    return {"topic": event.topic, "data": data}


async def websocket_session_endpoint(websocket: WebSocket, services: ServiceContainer) -> None:
    """
    Stream session events to one client until it disconnects.

    Incoming messages are ignored; the stream is one-way.
    """
    await websocket.accept()
    client_addr = websocket.client
    log.info(f"WebSocket connection accepted from {client_addr}")

    queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=QUEUE_LIMIT)

    def enqueue(event: Event) -> None:
        if queue.full():
            if event.type is EventType.TIMER_TICK:
                return
            queue.get_nowait()
        queue.put_nowait(event_message(event))

    bus = services.event_bus
    unsubscribers = [bus.subscribe(topic, enqueue) for topic in STREAMED_TOPICS]

    async def receive_until_disconnect() -> None:
        while True:
            await websocket.receive_text()

    receiver = asyncio.ensure_future(receive_until_disconnect())
    getter: Optional[asyncio.Future] = None
    try:
        snapshot = SessionStatusResponse.from_status(services.session_controller.status())
        await websocket.send_json({"topic": "session:status", "data": snapshot.model_dump()})

        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                getter.cancel()
                receiver.result()
                break
            await websocket.send_json(getter.result())

    except WebSocketDisconnect:
        log.info(f"WebSocket client {client_addr} disconnected")
    finally:
        for unsubscribe in unsubscribers:
            unsubscribe()
        receiver.cancel()
        if getter is not None:
            getter.cancel()
