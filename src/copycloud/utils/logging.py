"""Structured logging for the client (structlog on top of stdlib logging)."""

from __future__ import annotations

import logging
import os
import re
import sys
from contextlib import contextmanager
from typing import Any, Iterator, MutableMapping, cast

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from copycloud import __version__

MASK = "***MASKED***"
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "consumer_secret",
        "token_secret",
        "access_token",
        "oauth_signature",
    }
)
_OAUTH_PARAM = re.compile(r'(oauth_(?:signature|token)=")([^"]*)(")')


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credentials and signed header values before rendering."""
    for key in list(event_dict):
        value = event_dict[key]
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = MASK
        elif isinstance(value, str) and "oauth_" in value:
            event_dict[key] = _OAUTH_PARAM.sub(rf"\1{MASK}\3", value)
    return event_dict


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    try:
        return logging.getLevelNamesMapping()[level.upper()]
    except KeyError:
        raise ValueError(f"Invalid log level: {level}") from None


def _pre_chain() -> list[Processor]:
    # Runs for structlog events and for records from plain stdlib loggers (httpx)
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]


def configure_logging(level: str | int = "INFO", json_output: bool = True) -> None:
    """
    Route client logs to stderr, rendered as JSON lines or for a console.

    stdout is left to command output.
    """
    threshold = _level_number(level)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=(
                structlog.processors.JSONRenderer()
                if json_output
                else structlog.dev.ConsoleRenderer(colors=False)
            ),
            foreign_pre_chain=pre_chain,
        )
    )
    logging.basicConfig(level=threshold, handlers=[handler], force=True)


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger tagged with the client name and version."""
    return cast(
        BoundLogger,
        structlog.get_logger(name).bind(
            service_name=os.getenv("COPYCLOUD_SERVICE_NAME", "copycloud"),
            version=__version__,
        ),
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Attach ``path`` / ``fingerprint`` style fields to every event in the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = ["MASK", "redact_secrets", "configure_logging", "get_logger", "log_context"]
