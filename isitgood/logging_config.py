"""Logging setup.

Stdlib logging carries the level and handlers; structlog renders
key/value events on top of it.
"""

import logging
import os
from typing import Optional

import structlog


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Log level name; defaults to LOG_LEVEL env var, then INFO

    Example:
        >>> configure_logging("DEBUG")
        >>> structlog.get_logger(__name__).debug("Ready", component="cli")
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if os.getenv("LOG_FORMAT", "").lower() == "json":
        renderer: structlog.typing.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
