"""structlog setup shared by application loggers, uvicorn and httpx.

Everything goes through one stdlib handler on stdout whose
``ProcessorFormatter`` renders either a console line or a JSON object
(``RPM_LOG_FORMAT``). Records from foreign loggers get the same timestamp
and level fields as native structlog events.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from typing import Any

import structlog

from prmanager.settings import settings

# Positional args of a uvicorn.access record, in order.
ACCESS_FIELDS = ("client_addr", "method", "path", "http_version", "status_code")

# Loggers routed to the shared handler; None means "use the configured level".
ROUTED_LOGGERS: dict[str, int | None] = {
    "uvicorn": None,
    "uvicorn.error": None,
    "uvicorn.access": None,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def _access_fields(_logger: Any, _name: str, event_dict: dict) -> dict:
    record = event_dict.get("_record")
    if record is None or record.name != "uvicorn.access":
        return event_dict
    if isinstance(record.args, tuple) and len(record.args) >= len(ACCESS_FIELDS):
        event_dict.update(zip(ACCESS_FIELDS, record.args))
    return event_dict


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging() -> None:
    """Configure structlog and stdlib logging from ``RPM_LOG_*`` settings."""
    level = logging.getLevelName(settings.log_level())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(settings.log_format()),
        foreign_pre_chain=[*pre_chain, _access_fields],
    )
    loggers = {
        name: {"handlers": ["stdout"], "level": override or level, "propagate": False}
        for name, override in ROUTED_LOGGERS.items()
    }
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"structlog": {"()": lambda: formatter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": sys.stdout,
                }
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": loggers,
        }
    )
