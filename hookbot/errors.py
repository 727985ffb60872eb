"""Project-level exception hierarchy."""

from __future__ import annotations


class HookbotError(Exception):
    """Base for all hookbot exceptions."""


class ConfigurationError(HookbotError):
    """A required configuration value is missing."""


class TransportError(HookbotError):
    """The HTTP call failed before a response arrived."""


class APIError(HookbotError):
    """GitHub answered, but not with a usable 2xx response."""

    def __init__(self, status_code: int, reason: str, detail: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        message = f"Server returned: {status_code} {reason}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
