"""Tests for settings loading."""

import pytest

from hookbot.config import GITHUB_API_BASE, HooksConfig, Settings, WebhooksConfig, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "HUBOT_GITHUB_EVENT_HOOK_TOKEN",
        "HUBOT_GITHUB_HOOK_SECRET",
        "HUBOT_GITHUB_EVENT_BASE_URL",
        "HUBOT_CONFIG",
        "HUBOT_WEBHOOKS__PORT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.github_event_hook_token == ""
        assert settings.github_api_base == GITHUB_API_BASE
        assert isinstance(settings.webhooks, WebhooksConfig)
        assert settings.webhooks.enabled is False

    def test_env_names(self, monkeypatch):
        monkeypatch.setenv("HUBOT_GITHUB_EVENT_HOOK_TOKEN", "tok")
        monkeypatch.setenv("HUBOT_GITHUB_HOOK_SECRET", "sec")
        monkeypatch.setenv("HUBOT_GITHUB_EVENT_BASE_URL", "https://bot")
        monkeypatch.setenv("HUBOT_WEBHOOKS__PORT", "9000")
        settings = Settings()
        assert settings.github_event_hook_token == "tok"
        assert settings.github_hook_secret == "sec"
        assert settings.github_event_base_url == "https://bot"
        assert settings.webhooks.port == 9000

    def test_hooks_config(self):
        settings = Settings(
            github_event_hook_token="tok",
            github_event_base_url="https://bot",
            bot_name="mozbot",
        )
        hooks = settings.hooks_config()
        assert isinstance(hooks, HooksConfig)
        assert hooks.token == "tok"
        assert hooks.secret == ""
        assert hooks.event_base_url == "https://bot"
        assert hooks.user_agent == "mozbot"


class TestLoadSettings:
    def test_yaml_overlay(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "github_event_base_url: https://yaml-bot\n"
            "webhooks:\n  enabled: true\n  port: 9999\n"
        )
        settings = load_settings(path)
        assert settings.github_event_base_url == "https://yaml-bot"
        assert settings.webhooks.enabled is True
        assert settings.webhooks.port == 9999

    def test_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "c.yaml"
        path.write_text("bot_name: envbot\n")
        monkeypatch.setenv("HUBOT_CONFIG", str(path))
        assert load_settings().bot_name == "envbot"

    def test_missing_file_uses_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUBOT_GITHUB_EVENT_HOOK_TOKEN", "tok")
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings.github_event_hook_token == "tok"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).bot_name == "hookbot"
