"""structlog configuration shared by every eventfund module.

Modules obtain loggers with get_logger(__name__) and emit key-value events.
configure_logging() is called once by the CLI; library users may call it
themselves or leave structlog's defaults in place.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    extra_processors: Optional[list] = None,
) -> None:
    """Configure structlog over stdlib logging.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        format_json: Render JSON lines instead of the console renderer.
        include_timestamp: Add an ISO timestamp to every event.
        extra_processors: Processors inserted before the renderer.
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s",
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(name)


def get_campaign_logger(name: str, campaign_id: int) -> FilteringBoundLogger:
    """Logger bound to one campaign, for state-transition audit lines."""
    return get_logger(name).bind(campaign_id=campaign_id, subsystem="campaign")
