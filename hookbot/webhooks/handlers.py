"""Delivery signature validation and GitHub event normalization."""

from __future__ import annotations

import hashlib
import hmac
from typing import Any

from hookbot.webhooks.models import WebhookEvent


def validate_github_signature(body: bytes, signature: str, secret: str) -> bool:
    """Validate GitHub's ``X-Hub-Signature-256`` HMAC-SHA256 header.

    Returns False when either the secret or the signature is empty.
    """
    if not secret:
        return False
    if not signature:
        return False
    expected = "sha256=" + hmac.new(
        secret.encode(), body, hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)


def _summarize(event_type: str, payload: dict[str, Any], repo: str) -> str:
    if event_type == "push":
        count = len(payload.get("commits", []))
        branch = payload.get("ref", "").removeprefix("refs/heads/")
        pusher = payload.get("pusher", {}).get("name", "unknown")
        return f"{pusher} pushed {count} commit(s) to {repo}/{branch}"

    if event_type == "pull_request":
        pr = payload.get("pull_request", {})
        user = pr.get("user", {}).get("login", "unknown")
        return (
            f"{user} {payload.get('action', '')} PR #{pr.get('number', '?')} "
            f"on {repo}: {pr.get('title', '')}"
        )

    if event_type == "issues":
        issue = payload.get("issue", {})
        user = issue.get("user", {}).get("login", "unknown")
        return (
            f"{user} {payload.get('action', '')} issue #{issue.get('number', '?')} "
            f"on {repo}: {issue.get('title', '')}"
        )

    if event_type == "deployment":
        deployment = payload.get("deployment", {})
        creator = deployment.get("creator", {}).get("login", "unknown")
        env = deployment.get("environment", "unknown")
        ref = deployment.get("ref", "")
        return f"{creator} started a deployment of {repo}@{ref} to {env}"

    if event_type == "deployment_status":
        status = payload.get("deployment_status", {})
        env = status.get("environment") or payload.get("deployment", {}).get("environment", "unknown")
        return f"Deployment of {repo} to {env} is {status.get('state', 'unknown')}"

    if event_type == "ping":
        zen = payload.get("zen", "")
        return f"GitHub says hello from {repo}: {zen}" if zen else f"GitHub says hello from {repo}"

    return f"GitHub {event_type} event on {repo}"


def normalize_github_event(
    event_type: str, payload: dict[str, Any], room: str, delivery_id: str = ""
) -> WebhookEvent:
    """Normalize a GitHub delivery into a WebhookEvent for ``room``."""
    repo = payload.get("repository", {}).get("full_name", "unknown")
    return WebhookEvent(
        event_type=event_type,
        summary=_summarize(event_type, payload, repo),
        room=room,
        repository=repo,
        delivery_id=delivery_id,
        payload=payload,
    )
