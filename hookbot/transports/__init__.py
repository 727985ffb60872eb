"""hookbot transports."""

from hookbot.transports.base import Transport
from hookbot.transports.console import ConsoleTransport

__all__ = [
    "ConsoleTransport",
    "Transport",
]
