"""Opinionated JSON logging configuration for the meta workspace server."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Optional

import structlog


def configure_logging(
    level: Optional[str] = None,
    service_name: Optional[str] = None,
    structured: bool = True,
) -> None:
    """Configure logging for the server.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL
        service_name: Name of the service bound to every event
        structured: Whether to render events as JSON
    """
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, lvl, logging.INFO)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if service_name:
        processors.insert(0, _bind_service(service_name))
    processors.append(
        structlog.processors.JSONRenderer() if structured else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # stdio transport owns stdout, so logs go to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
    for n in ("uvicorn", "uvicorn.error", "uvicorn.access", "mcp", "mcp.server"):
        logging.getLogger(n).setLevel(log_level)


def _bind_service(service_name: str):
    def processor(_logger: Any, _method: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", service_name)
        return event_dict
    return processor


def get_logger(name: str, **context: Any) -> Any:
    """Get a logger instance with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind to the logger

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


def preview(s: Any, n: int = 300) -> str:
    """Shorten command output for log lines."""
    if isinstance(s, bytes):
        s = s.decode("utf-8", "replace")
    s = str(s).strip()
    return s if len(s) <= n else (s[: n - 20] + "... <truncated>")
