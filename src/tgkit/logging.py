from __future__ import annotations

import logging
import re
import sys
from typing import Any, TextIO

import structlog

__all__ = ["get_logger", "redact", "redact_token_processor", "setup_logging"]

# `bot<id>:<secret>` as it appears in Bot API URLs, then bare `<id>:<secret>`.
TOKEN_IN_URL_RE = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
BARE_TOKEN_RE = re.compile(r"\b\d+:[A-Za-z0-9_-]{10,}\b")


def redact(text: str) -> str:
    text = TOKEN_IN_URL_RE.sub("bot[REDACTED]", text)
    return BARE_TOKEN_RE.sub("[REDACTED_TOKEN]", text)


def redact_token_processor(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Strip Bot API tokens from every top-level string in the event.

    Transport errors routinely embed request URLs, so ``error`` and any
    other bound string is covered, not just the event text.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact(value)
    return event_dict


def get_logger(name: str | None = None, **initial: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name, **initial)


def _renderer(debug: bool) -> Any:
    if debug:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(*, debug: bool = False, stream: TextIO | None = None) -> None:
    """Route structlog through stdlib logging with token redaction.

    Debug mode lowers the level to DEBUG (queue and dispatch traces) and
    switches to the console renderer.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            redact_token_processor,
            _renderer(debug),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=stream if stream is not None else sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
        force=True,
    )
