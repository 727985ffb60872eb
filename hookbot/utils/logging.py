"""structlog configuration for hookbot.

Every module logs through ``get_logger(__name__)`` with a snake_case event
name and key/value context, e.g. ``log.info("hook_added", owner=..., repo=...)``.
"""

from __future__ import annotations

import logging
import re
import sys

import structlog


_SENSITIVE = re.compile(
    r"(token|secret|authorization)[\"']?\s*[:=]\s*[\"']?(?:token\s+)?[\w\-\.]+",
    re.IGNORECASE,
)

# Request logs from the HTTP stacks are noise at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "aiohttp.access")


def _filter_sensitive(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Mask GitHub tokens and hook secrets in string values.

    Covers ``Authorization: token ...`` headers as well as ``secret=...``
    style pairs; other values pass through untouched.
    """
    for key, value in list(event_dict.items()):
        if isinstance(value, str) and _SENSITIVE.search(value):
            event_dict[key] = _SENSITIVE.sub(r"\1=***REDACTED***", value)
    return event_dict


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    ``json_output`` switches the console renderer for one JSON object per line.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _filter_sensitive,
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for ``name``; output follows whatever ``setup_logging`` configured."""
    return structlog.get_logger(name)
