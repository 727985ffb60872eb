"""Typed chat message models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class IncomingMessage:
    """A chat message plus its envelope; ``channel`` is the room identifier."""

    platform: str
    channel: str
    user_id: str
    content: str
    user_name: str = ""
    message_id: str = ""


@dataclass
class OutgoingMessage:
    platform: str
    channel: str
    content: str
    reply_to: str | None = None
