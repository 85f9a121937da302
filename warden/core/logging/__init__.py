"""
Logging configuration module for structured logging.

This module configures the package's logging using structlog, with JSON
output for production and human-readable console output for development.
"""

import logging

import structlog

from warden.core.config.settings import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures structlog for the process.

    Sets up ISO timestamps, log level inclusion, and either the JSON or the
    console renderer. Arguments left as None fall back to LOG_LEVEL and
    LOG_JSON from the settings.
    """
    level = (log_level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def mask_email(email: str | None) -> str:
    """Mask an email address for log output (``abc***@domain``)."""
    if not email or "@" not in email:
        return "unknown"

    local, domain = email.split("@", 1)
    if len(local) > 3:
        local = local[:3] + "***"
    return f"{local}@{domain}"
