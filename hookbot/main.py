"""hookbot entry point: wires everything together and runs the bot."""

from __future__ import annotations

import asyncio
import signal
import sys

import click
import httpx

from hookbot.config import Settings, load_settings
from hookbot.core.bus import Event, EventBus, EventType, MessageOutgoing
from hookbot.core.commands import CommandHandler
from hookbot.models import IncomingMessage, OutgoingMessage
from hookbot.transports.console import ConsoleTransport
from hookbot.utils.logging import get_logger, setup_logging
from hookbot.webhooks.server import WebhookServer

log = get_logger(__name__)


class Hookbot:
    """Main application orchestrator."""

    def __init__(self, settings: Settings, room: str = "console") -> None:
        self.settings = settings
        self.stop_event = asyncio.Event()

        self.bus = EventBus()
        self.http = httpx.AsyncClient(timeout=settings.http_timeout)
        self.commands = CommandHandler(
            settings.hooks_config(), self._send, client=self.http, bot_name=settings.bot_name
        )
        self.transport = ConsoleTransport(self.bus, room=room, on_close=self.stop_event.set)
        self.webhooks: WebhookServer | None = None
        if settings.webhooks.enabled:
            self.webhooks = WebhookServer(
                settings.webhooks, self.bus, secret=settings.github_hook_secret
            )

    async def start(self) -> None:
        log.info("hookbot_starting", version="0.1.0", api_base=self.settings.github_api_base)

        self.bus.subscribe(EventType.MESSAGE_INCOMING, self._handle_message)
        self.bus.subscribe(EventType.WEBHOOK_RECEIVED, self._handle_webhook)

        if self.webhooks is not None:
            await self.webhooks.start()

        await self.transport.start()
        await self.bus.start()

        log.info("hookbot_ready")

    async def stop(self) -> None:
        log.info("hookbot_stopping")
        await self.bus.stop()
        await self.transport.stop()
        if self.webhooks is not None:
            await self.webhooks.stop()
        await self.http.aclose()
        log.info("hookbot_stopped")

    async def _handle_message(self, event: Event) -> None:
        msg: IncomingMessage = event.message  # type: ignore[attr-defined]
        log.info("message_received", platform=msg.platform, channel=msg.channel)
        if not await self.commands.handle(msg):
            log.debug("message_ignored", channel=msg.channel)

    async def _handle_webhook(self, event: Event) -> None:
        room = event.data.get("channel_target", "")
        if not room:
            return
        await self._send(self.transport.platform_name, room, event.data["summary"])

    async def _send(self, platform: str, channel: str, content: str) -> None:
        await self.bus.publish(
            MessageOutgoing(message=OutgoingMessage(
                platform=platform,
                channel=channel,
                content=content,
            ))
        )


async def run(settings: Settings, room: str = "console") -> None:
    app = Hookbot(settings, room=room)

    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        app.stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    await app.start()

    try:
        await app.stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()


async def say(settings: Settings, text: str, room: str = "console") -> bool:
    """Dispatch a single command, echoing replies; False if nothing matched."""

    async def _echo(platform: str, channel: str, content: str) -> None:
        click.echo(f"[{channel}] {content}")

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        handler = CommandHandler(
            settings.hooks_config(), _echo, client=client, bot_name=settings.bot_name
        )
        message = IncomingMessage(
            platform="console", channel=room, user_id="operator", content=text
        )
        return await handler.handle(message)


def _prepare(config_path: str | None, log_level: str | None) -> Settings:
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    return settings


@click.group()
def cli() -> None:
    """Manage GitHub repository hooks from chat."""


@cli.command("run")
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--room", default="console", show_default=True, help="Room the console speaks in")
def run_cmd(config_path: str | None, log_level: str | None, room: str) -> None:
    """Read commands from stdin and receive GitHub events."""
    settings = _prepare(config_path, log_level)
    asyncio.run(run(settings, room=room))


@cli.command("say")
@click.argument("text")
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--room", default="console", show_default=True, help="Room the command is issued in")
def say_cmd(text: str, config_path: str | None, log_level: str | None, room: str) -> None:
    """Run a single chat command, e.g. "list hooks on octocat/hello-world"."""
    settings = _prepare(config_path, log_level)
    if not asyncio.run(say(settings, text, room=room)):
        raise click.UsageError(f"Unrecognized command: {text!r}. Try 'help'.")


if __name__ == "__main__":
    cli()
