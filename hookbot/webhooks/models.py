"""Models for events delivered by GitHub hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class WebhookEvent:
    """A normalized GitHub delivery, addressed to the room it was registered for."""

    event_type: str
    summary: str
    room: str
    repository: str = "unknown"
    delivery_id: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
