"""Async pub/sub event bus."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Coroutine
from uuid import uuid4

from hookbot.models import IncomingMessage, OutgoingMessage
from hookbot.utils.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------

class EventType(str, Enum):
    MESSAGE_INCOMING = "message.incoming"
    MESSAGE_OUTGOING = "message.outgoing"
    WEBHOOK_RECEIVED = "webhook.received"


@dataclass
class Event:
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid4().hex[:12])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class MessageIncoming(Event):
    type: EventType = field(default=EventType.MESSAGE_INCOMING, init=False)
    message: IncomingMessage | None = field(default=None)


@dataclass
class MessageOutgoing(Event):
    type: EventType = field(default=EventType.MESSAGE_OUTGOING, init=False)
    message: OutgoingMessage | None = field(default=None)


@dataclass
class WebhookReceived(Event):
    type: EventType = field(default=EventType.WEBHOOK_RECEIVED, init=False)
    # data keys: source, event_type, summary, payload, channel_target


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------

Handler = Callable[[Event], Coroutine[Any, Any, None]]


class EventBus:
    """Fan-out of events to per-subscriber queues, drained by one task each.

    Subscriptions must be registered before ``start``. A handler that raises
    is logged and keeps receiving later events.
    """

    def __init__(self, max_queue_size: int = 256) -> None:
        self._subscribers: dict[EventType, list[tuple[Handler, asyncio.Queue[Event]]]] = {}
        self._max_queue_size = max_queue_size
        self._tasks: list[asyncio.Task[None]] = []

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.setdefault(event_type, []).append((handler, queue))

    async def publish(self, event: Event) -> None:
        for handler, queue in self._subscribers.get(event.type, []):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                log.warning(
                    "event_dropped",
                    event_type=event.type.value,
                    event_id=event.id,
                    handler=handler.__qualname__,
                )

    async def start(self) -> None:
        for event_type, handler_list in self._subscribers.items():
            for handler, queue in handler_list:
                self._tasks.append(asyncio.create_task(
                    self._drain(handler, queue, event_type),
                    name=f"bus-{event_type.value}-{handler.__qualname__}",
                ))

    async def _drain(
        self, handler: Handler, queue: asyncio.Queue[Event], event_type: EventType
    ) -> None:
        while True:
            event = await queue.get()
            try:
                await handler(event)
            except Exception:
                log.exception("handler_error", event_type=event_type.value, event_id=event.id)
            finally:
                queue.task_done()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
