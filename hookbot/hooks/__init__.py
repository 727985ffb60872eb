"""GitHub repository hook management."""

from .manager import HookManager
from .models import GITHUB_EVENTS_PATH, HOOK_EVENTS, Hook, HookConfig, HookRequest

__all__ = [
    "GITHUB_EVENTS_PATH",
    "HOOK_EVENTS",
    "Hook",
    "HookConfig",
    "HookManager",
    "HookRequest",
]
