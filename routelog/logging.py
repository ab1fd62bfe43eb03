from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


_CONFIGURED = False


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog + stdlib logging for JSON output on stderr.

    Two outputs exist side by side: the colorized route lines, written
    verbatim to the sink handed to ``RequestLoggerMiddleware`` (stdout by
    default), and the structured events configured here (``route_start``,
    ``route_line_write_failed``, application logs). Keeping them on separate
    streams lets the console lines stay human-readable while the JSON events
    carry the bound ``request_id``/``method``/``path`` context.

    ``level`` accepts a logging constant or a name such as ``"DEBUG"``.
    Safe to call multiple times (no-op after first call).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(level)

    # Route lines replace uvicorn's access log.
    logging.getLogger("uvicorn.access").disabled = True

    _CONFIGURED = True
