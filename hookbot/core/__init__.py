"""Core modules for hookbot."""

from .bus import EventBus, EventType
from .commands import CommandHandler

__all__ = ["CommandHandler", "EventBus", "EventType"]
