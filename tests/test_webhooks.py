"""Tests for the GitHub delivery receiver."""

import asyncio
import hashlib
import hmac
import json

import pytest
from aiohttp.test_utils import TestClient, TestServer

from hookbot.config import WebhooksConfig
from hookbot.core.bus import EventBus, EventType
from hookbot.webhooks.handlers import normalize_github_event, validate_github_signature
from hookbot.webhooks.models import WebhookEvent
from hookbot.webhooks.server import WebhookServer


def _sign(body: bytes, secret: str) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


PUSH = {
    "ref": "refs/heads/main",
    "pusher": {"name": "alice"},
    "commits": [{"id": "abc"}, {"id": "def"}],
    "repository": {"full_name": "org/repo"},
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestGitHubSignature:
    def test_valid_signature(self):
        body = b'{"zen": "hi"}'
        assert validate_github_signature(body, _sign(body, "my-secret"), "my-secret") is True

    def test_invalid_signature(self):
        assert validate_github_signature(b"{}", "sha256=bad", "my-secret") is False

    def test_missing_signature(self):
        assert validate_github_signature(b"{}", "", "my-secret") is False

    def test_no_secret(self):
        assert validate_github_signature(b"{}", "sha256=abc", "") is False


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizeGitHub:
    def test_push(self):
        event = normalize_github_event("push", PUSH, "dev", delivery_id="d-1")
        assert isinstance(event, WebhookEvent)
        assert event.summary == "alice pushed 2 commit(s) to org/repo/main"
        assert event.room == "dev"
        assert event.repository == "org/repo"
        assert event.delivery_id == "d-1"

    def test_pull_request(self):
        payload = {
            "action": "opened",
            "pull_request": {"number": 42, "title": "Add feature", "user": {"login": "bob"}},
            "repository": {"full_name": "org/repo"},
        }
        event = normalize_github_event("pull_request", payload, "dev")
        assert event.summary == "bob opened PR #42 on org/repo: Add feature"

    def test_issues(self):
        payload = {
            "action": "closed",
            "issue": {"number": 7, "title": "Crash", "user": {"login": "carol"}},
            "repository": {"full_name": "org/repo"},
        }
        assert "carol closed issue #7" in normalize_github_event("issues", payload, "dev").summary

    def test_deployment(self):
        payload = {
            "deployment": {"ref": "v1.2", "environment": "production", "creator": {"login": "dan"}},
            "repository": {"full_name": "org/repo"},
        }
        event = normalize_github_event("deployment", payload, "ops")
        assert event.summary == "dan started a deployment of org/repo@v1.2 to production"

    def test_deployment_status(self):
        payload = {
            "deployment_status": {"state": "success", "environment": "staging"},
            "repository": {"full_name": "org/repo"},
        }
        event = normalize_github_event("deployment_status", payload, "ops")
        assert event.summary == "Deployment of org/repo to staging is success"

    def test_ping(self):
        payload = {"zen": "Keep it logically awesome.", "repository": {"full_name": "org/repo"}}
        summary = normalize_github_event("ping", payload, "dev").summary
        assert summary == "GitHub says hello from org/repo: Keep it logically awesome."

    def test_unknown_event(self):
        event = normalize_github_event("star", {}, "dev")
        assert event.summary == "GitHub star event on unknown"


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def received(bus):
    events = []

    async def handler(event):
        events.append(event)

    bus.subscribe(EventType.WEBHOOK_RECEIVED, handler)
    return events


@pytest.fixture
async def client(bus):
    server = WebhookServer(WebhooksConfig(enabled=True), bus, secret="gh-secret")
    async with TestClient(TestServer(server._build_app())) as c:
        yield c


@pytest.fixture
async def open_client(bus):
    server = WebhookServer(WebhooksConfig(enabled=True), bus)
    async with TestClient(TestServer(server._build_app())) as c:
        yield c


class TestWebhookServer:
    async def test_malformed_payload_returns_400(self, client):
        resp = await client.post(
            "/mozbot/github-events/dev",
            data=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400

    async def test_invalid_signature_returns_401(self, client):
        resp = await client.post(
            "/mozbot/github-events/dev",
            json=PUSH,
            headers={"X-Hub-Signature-256": "sha256=invalid"},
        )
        assert resp.status == 401

    async def test_missing_signature_returns_401(self, client):
        resp = await client.post("/mozbot/github-events/dev", json=PUSH)
        assert resp.status == 401

    async def test_unknown_path_returns_404(self, client):
        resp = await client.post("/webhooks/unknown", json={"test": True})
        assert resp.status == 404

    async def test_signed_push_routes_to_room(self, client, bus, received):
        await bus.start()
        body = json.dumps(PUSH).encode()
        resp = await client.post(
            "/mozbot/github-events/dev",
            data=body,
            headers={
                "Content-Type": "application/json",
                "X-Hub-Signature-256": _sign(body, "gh-secret"),
                "X-GitHub-Event": "push",
                "X-GitHub-Delivery": "abc-123",
            },
        )
        assert resp.status == 200

        await asyncio.sleep(0.1)
        assert len(received) == 1
        assert received[0].data["event_type"] == "push"
        assert received[0].data["channel_target"] == "dev"
        assert "alice pushed 2 commit(s)" in received[0].data["summary"]

        await bus.stop()

    async def test_unsigned_rejected_without_secret(self, open_client, received):
        resp = await open_client.post(
            "/mozbot/github-events/dev",
            json=PUSH,
            headers={"X-GitHub-Event": "push"},
        )
        assert resp.status == 401
        assert received == []

    async def test_any_signature_rejected_without_secret(self, open_client):
        body = json.dumps(PUSH).encode()
        resp = await open_client.post(
            "/mozbot/github-events/dev",
            data=body,
            headers={
                "Content-Type": "application/json",
                "X-Hub-Signature-256": _sign(body, ""),
            },
        )
        assert resp.status == 401

    async def test_encoded_room_is_decoded(self, client, bus, received):
        await bus.start()
        body = json.dumps(PUSH).encode()
        resp = await client.post(
            "/mozbot/github-events/%23ops",
            data=body,
            headers={
                "Content-Type": "application/json",
                "X-Hub-Signature-256": _sign(body, "gh-secret"),
                "X-GitHub-Event": "push",
            },
        )
        assert resp.status == 200

        await asyncio.sleep(0.1)
        assert received[0].data["channel_target"] == "#ops"

        await bus.stop()
