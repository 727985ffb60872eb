"""Terminal transport: stdin lines in, replies echoed with click."""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import Callable, TextIO

import click

from hookbot.core.bus import Event, EventBus, EventType, MessageIncoming
from hookbot.models import IncomingMessage, OutgoingMessage
from hookbot.transports.base import Transport
from hookbot.utils.logging import get_logger

log = get_logger(__name__)


class ConsoleTransport(Transport):
    """Treats each line typed on the terminal as a message in ``room``.

    Lines are read on a daemon thread, so a blocked read never holds up
    shutdown; ``stop`` only has to cancel the task draining them.
    """

    def __init__(
        self,
        bus: EventBus,
        room: str = "console",
        stream: TextIO | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(bus)
        self._room = room
        self._stream = stream or sys.stdin
        self._on_close = on_close
        self._reader: asyncio.Task[None] | None = None
        self._lines: asyncio.Queue[str] = asyncio.Queue()
        self._pump: threading.Thread | None = None
        self._counter = 0

    @property
    def platform_name(self) -> str:
        return "console"

    async def start(self) -> None:
        self.bus.subscribe(EventType.MESSAGE_OUTGOING, self._handle_outgoing)
        self._pump = threading.Thread(
            target=self._pump_lines,
            args=(asyncio.get_running_loop(),),
            name="console-stdin",
            daemon=True,
        )
        self._pump.start()
        self._reader = asyncio.create_task(self._read_loop(), name="console-reader")
        log.info("console_transport_started", room=self._room)

    async def stop(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            await asyncio.gather(self._reader, return_exceptions=True)
            self._reader = None
        log.info("console_transport_stopped")

    def _pump_lines(self, loop: asyncio.AbstractEventLoop) -> None:
        while True:
            try:
                line = self._stream.readline()
            except (OSError, ValueError):
                log.warning("console_read_failed", exc_info=True)
                line = ""
            try:
                loop.call_soon_threadsafe(self._lines.put_nowait, line)
            except RuntimeError:
                # loop already closed
                return
            if not line:
                return

    async def _read_loop(self) -> None:
        while True:
            line = await self._lines.get()
            if not line:
                log.info("console_eof")
                if self._on_close is not None:
                    self._on_close()
                return
            content = line.strip()
            if not content:
                continue
            self._counter += 1
            await self.bus.publish(
                MessageIncoming(message=IncomingMessage(
                    platform=self.platform_name,
                    channel=self._room,
                    user_id="operator",
                    content=content,
                    message_id=str(self._counter),
                ))
            )

    async def _handle_outgoing(self, event: Event) -> None:
        msg: OutgoingMessage | None = event.message  # type: ignore[attr-defined]
        if msg is None or msg.platform != self.platform_name:
            return
        await self.send_message(msg.channel, msg.content, reply_to=msg.reply_to)

    async def send_message(
        self, channel: str, content: str, *, reply_to: str | None = None
    ) -> None:
        click.echo(f"[{channel}] {content}")
