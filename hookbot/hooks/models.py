"""GitHub hook models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Path the webhook server listens on; registered hooks deliver to {base}{path}/{room}
GITHUB_EVENTS_PATH = "/mozbot/github-events"

HOOK_EVENTS = ("issues", "pull_request", "push", "deployment", "deployment_status")


@dataclass
class HookConfig:
    url: str = ""
    content_type: str = ""
    secret: str = ""


@dataclass
class Hook:
    id: int
    name: str
    config: HookConfig = field(default_factory=HookConfig)
    events: list[str] = field(default_factory=list)
    active: bool = True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Hook:
        config = data.get("config")
        if not isinstance(config, dict):
            config = {}
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            config=HookConfig(
                url=config.get("url", ""),
                content_type=config.get("content_type", ""),
                secret=config.get("secret", ""),
            ),
            events=list(data.get("events", [])),
            active=data.get("active", True),
        )

    def describe(self) -> str:
        if self.name == "web":
            return f"{self.id}: {self.name} -- {self.config.url}"
        return f"{self.id}: {self.name}"


@dataclass
class HookRequest:
    owner: str
    repo: str
    target_url: str
    secret: str | None = None
    events: tuple[str, ...] = HOOK_EVENTS

    def to_payload(self) -> dict[str, Any]:
        config: dict[str, Any] = {"content_type": "json", "url": self.target_url}
        if self.secret:
            config["secret"] = self.secret
        return {
            "name": "web",
            "active": True,
            "config": config,
            "events": list(self.events),
        }
