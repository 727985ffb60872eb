"""Chat-facing orchestration of the GitHub repository hooks API."""

from __future__ import annotations

import traceback
from typing import Any, Callable, Coroutine
from urllib.parse import quote

import httpx

from hookbot.config import HooksConfig
from hookbot.errors import APIError, ConfigurationError, HookbotError, TransportError
from hookbot.hooks.models import GITHUB_EVENTS_PATH, Hook, HookRequest
from hookbot.models import IncomingMessage
from hookbot.utils.logging import get_logger

log = get_logger(__name__)

SendFn = Callable[[str, str, str], Coroutine[Any, Any, None]]


class HookManager:
    """Turns one chat command into one hooks API call and one reply.

    A manager is built per incoming message. Configuration arrives through
    ``config`` rather than the environment, and ``client`` lets callers share
    (or mock) the underlying ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        config: HooksConfig,
        message: IncomingMessage,
        send_fn: SendFn,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._message = message
        self._send = send_fn  # send_fn(platform, channel, content)
        self._client = client

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def add_hook(self, owner: str, repo: str) -> None:
        action = f"adding the GitHub event hook to {owner}/{repo}"
        try:
            request = HookRequest(
                owner=owner,
                repo=repo,
                target_url=self.build_hook_url(owner, repo),
                secret=self._config.secret or None,
            )
            await self._call("POST", owner, repo, json=request.to_payload())
        except HookbotError as exc:
            await self._handle_error(exc, action)
            return

        log.info("hook_added", owner=owner, repo=repo, target_url=request.target_url)
        await self._reply("I was able to successfully add the GitHub events hook")

    async def list_hooks(self, owner: str, repo: str) -> None:
        action = f"listing the GitHub hooks on {owner}/{repo}"
        try:
            response = await self._call("GET", owner, repo)
            hooks = self._parse_hooks(response)
        except HookbotError as exc:
            await self._handle_error(exc, action)
            return

        log.info("hooks_listed", owner=owner, repo=repo, count=len(hooks))
        await self._reply(
            f"{owner}/{repo} has the following hooks:\n\n{self.format_hooks(hooks)}"
        )

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def build_api_url(self, owner: str, repo: str) -> str:
        base = self._config.api_base.rstrip("/")
        return f"{base}/repos/{owner}/{repo}/hooks"

    def build_hook_url(self, owner: str, repo: str) -> str:
        """Delivery URL for events of ``owner/repo``, routed back to this room."""
        base = self._config.event_base_url
        if not base:
            raise ConfigurationError(
                "HUBOT_GITHUB_EVENT_BASE_URL is not set, so I don't know where "
                f"GitHub should deliver events for {owner}/{repo}"
            )
        room = quote(self._message.channel, safe="")
        return f"{base.rstrip('/')}{GITHUB_EVENTS_PATH}/{room}"

    def get_token(self) -> str:
        if not self._config.token:
            raise ConfigurationError(
                "HUBOT_GITHUB_EVENT_HOOK_TOKEN is not set, so I can't talk to the GitHub API"
            )
        return self._config.token

    @staticmethod
    def is_successful(response: httpx.Response) -> bool:
        return 200 <= response.status_code < 300

    @staticmethod
    def format_hooks(hooks: list[Hook]) -> str:
        return "\n".join(hook.describe() for hook in hooks)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"token {self.get_token()}",
            "User-Agent": self._config.user_agent,
        }

    async def _call(
        self, method: str, owner: str, repo: str, **kwargs: Any
    ) -> httpx.Response:
        url = self.build_api_url(owner, repo)
        headers = self._headers()

        log.debug("hooks_api_request", method=method, url=url)
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if not self.is_successful(response):
            raise APIError(response.status_code, response.reason_phrase)
        return response

    def _parse_hooks(self, response: httpx.Response) -> list[Hook]:
        try:
            data = response.json()
        except ValueError as exc:
            raise APIError(
                response.status_code, response.reason_phrase, "response body is not valid JSON"
            ) from exc
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise APIError(
                response.status_code, response.reason_phrase, "expected a list of hooks"
            )
        return [Hook.from_api(item) for item in data]

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    async def _reply(self, content: str) -> None:
        await self._send(self._message.platform, self._message.channel, content)

    async def _handle_error(self, exc: HookbotError, action: str) -> None:
        if isinstance(exc, ConfigurationError):
            log.error("hook_config_missing", action=action, error=str(exc))
            await self._reply(str(exc))

        elif isinstance(exc, APIError):
            log.error(
                "hooks_api_rejected",
                action=action,
                status=exc.status_code,
                reason=exc.reason,
                detail=exc.detail,
            )
            await self._reply(str(exc))

        else:
            cause = exc.__cause__ or exc
            log.error("hooks_api_unreachable", action=action, error=str(exc), exc_info=cause)
            stack = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
            await self._reply(f"I encountered an error while {action}\n{exc}\n{stack}")
