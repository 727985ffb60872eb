"""HTTP receiver for GitHub hook deliveries, using aiohttp."""

from __future__ import annotations

from typing import Any

from aiohttp import web

from hookbot.config import WebhooksConfig
from hookbot.core.bus import EventBus, WebhookReceived
from hookbot.hooks.models import GITHUB_EVENTS_PATH
from hookbot.utils.logging import get_logger
from hookbot.webhooks.handlers import normalize_github_event, validate_github_signature

log = get_logger(__name__)


class WebhookServer:
    """Receives deliveries at ``/mozbot/github-events/{room}`` and publishes them to the bus."""

    def __init__(self, config: WebhooksConfig, bus: EventBus, secret: str = "") -> None:
        self._config = config
        self._bus = bus
        self._secret = secret
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if not self._secret:
            log.warning(
                "webhook_no_secret",
                msg="HUBOT_GITHUB_HOOK_SECRET is unset; every delivery will be rejected. Set a secret before adding hooks.",
            )
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.bind, self._config.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=self._config.bind,
            port=self._config.port,
            path=GITHUB_EVENTS_PATH,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(GITHUB_EVENTS_PATH + "/{room}", self._handle_delivery)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_delivery(self, request: web.Request) -> web.Response:
        room = request.match_info["room"]
        body = await request.read()

        try:
            payload: dict[str, Any] = await request.json()
        except ValueError:
            return web.Response(status=400, text="Invalid JSON")
        if not isinstance(payload, dict):
            return web.Response(status=400, text="Invalid JSON")

        # Unsigned deliveries are refused, including when no secret is configured
        signature = request.headers.get("X-Hub-Signature-256", "")
        if not validate_github_signature(body, signature, self._secret):
            log.warning("webhook_bad_signature", room=room, secret_configured=bool(self._secret))
            return web.Response(status=401, text="Invalid signature")

        event = normalize_github_event(
            request.headers.get("X-GitHub-Event", "unknown"),
            payload,
            room,
            delivery_id=request.headers.get("X-GitHub-Delivery", ""),
        )

        await self._bus.publish(
            WebhookReceived(
                data={
                    "source": "github",
                    "event_type": event.event_type,
                    "summary": event.summary,
                    "payload": event.payload,
                    "channel_target": event.room,
                }
            )
        )

        log.info(
            "webhook_received",
            event_type=event.event_type,
            repository=event.repository,
            delivery=event.delivery_id,
            room=room,
        )

        return web.Response(status=200, text="OK")
