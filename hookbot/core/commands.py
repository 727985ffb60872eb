"""Chat command dispatch for hook management."""

from __future__ import annotations

import re

import httpx

from hookbot.config import HooksConfig
from hookbot.hooks.manager import HookManager, SendFn
from hookbot.models import IncomingMessage
from hookbot.utils.logging import get_logger

log = get_logger(__name__)

# owner is anything up to the first "/", repo is the rest of the line
_LIST_HOOKS = r"list hooks on ([^/]+)/(.+)"
_LISTEN = r"listen for events on ([^/]+)/(.+)"
_HELP = r"(?:hooks )?help"

HELP_TEXT = (
    "list hooks on <owner>/<repo> - show the hooks registered on a repository\n"
    "listen for events on <owner>/<repo> - send that repository's events to this room"
)


def _command_re(bot_name: str, command: str) -> re.Pattern[str]:
    """Whole-message match, optionally addressed as ``name:``, ``@name,`` etc."""
    prefix = rf"(?:@?{re.escape(bot_name)}[:,]?\s+)?"
    return re.compile(rf"^{prefix}{command}$", re.IGNORECASE)


class CommandHandler:
    """Matches hook commands and hands them to a fresh HookManager."""

    def __init__(
        self,
        config: HooksConfig,
        send_fn: SendFn,
        client: httpx.AsyncClient | None = None,
        bot_name: str = "hookbot",
    ) -> None:
        self._config = config
        self._send = send_fn
        self._client = client
        self._list_re = _command_re(bot_name, _LIST_HOOKS)
        self._listen_re = _command_re(bot_name, _LISTEN)
        self._help_re = _command_re(bot_name, _HELP)

    async def handle(self, message: IncomingMessage) -> bool:
        """Dispatch ``message``; returns False when no command matched."""
        content = message.content.strip()

        match = self._list_re.match(content)
        if match:
            owner, repo = match.groups()
            log.info("command_list_hooks", owner=owner, repo=repo, channel=message.channel)
            await self._manager(message).list_hooks(owner, repo)
            return True

        match = self._listen_re.match(content)
        if match:
            owner, repo = match.groups()
            log.info("command_listen", owner=owner, repo=repo, channel=message.channel)
            await self._manager(message).add_hook(owner, repo)
            return True

        if self._help_re.match(content):
            await self._send(message.platform, message.channel, HELP_TEXT)
            return True

        return False

    def _manager(self, message: IncomingMessage) -> HookManager:
        return HookManager(self._config, message, self._send, client=self._client)
