"""
Structured logging setup.

The library itself only emits events through ``structlog.get_logger``;
applications embedding it call :func:`configure_logging` once at startup.
"""

import logging
from typing import Optional

import structlog


def configure_logging(log_level: Optional[str] = None, json_output: bool = False) -> None:
    """Configure stdlib logging and structlog for nginxlog events."""
    if log_level is None:
        from .config import get_settings

        log_level = get_settings().log_level

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logging.basicConfig(
        format="%(message)s",
        level=level,
    )
    logging.getLogger("nginxlog").setLevel(level)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
