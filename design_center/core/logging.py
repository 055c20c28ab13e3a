"""Logging setup shared by the API process."""

from __future__ import annotations

import logging
import re
import sys

import structlog

from .config import get_settings

_credentials_pattern = re.compile(r"//[^/@]*@")


def configure_logging() -> None:
    """Route stdlib logging to stdout and configure structlog processors."""

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def mask_credentials(url: str) -> str:
    """Hide the user:password part of a connection URL."""

    return _credentials_pattern.sub("//***:***@", url)
