"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


GITHUB_API_BASE = "https://api.github.com"


class HooksConfig(BaseModel):
    """Values a HookManager needs; built from Settings and injected."""

    token: str = ""
    secret: str = ""
    event_base_url: str = ""
    api_base: str = GITHUB_API_BASE
    user_agent: str = "hookbot"
    timeout: float = 30.0


class WebhooksConfig(BaseModel):
    enabled: bool = False
    bind: str = "0.0.0.0"
    port: int = 8420


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HUBOT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # HUBOT_GITHUB_EVENT_HOOK_TOKEN, HUBOT_GITHUB_HOOK_SECRET, HUBOT_GITHUB_EVENT_BASE_URL
    github_event_hook_token: str = ""
    github_hook_secret: str = ""
    github_event_base_url: str = ""
    github_api_base: str = GITHUB_API_BASE
    bot_name: str = "hookbot"
    http_timeout: float = 30.0
    webhooks: WebhooksConfig = Field(default_factory=WebhooksConfig)
    log_level: str = "INFO"
    log_json: bool = False

    def hooks_config(self) -> HooksConfig:
        return HooksConfig(
            token=self.github_event_hook_token,
            secret=self.github_hook_secret,
            event_base_url=self.github_event_base_url,
            api_base=self.github_api_base,
            user_agent=self.bot_name,
            timeout=self.http_timeout,
        )


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("HUBOT_CONFIG")

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # YAML values are passed as init kwargs and win over the environment
    return Settings(**yaml_data)
