"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from adaptwell.core.context import get_cycle_id, get_request_id

NOISY_LOGGERS = ("httpx", "openai", "apscheduler.executors.default")


class CorrelationFilter(logging.Filter):
    """Attach request_id and cycle_id attributes to log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        record.cycle_id = get_cycle_id() or "-"
        return True


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure application logging once at startup (API process or worker)."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s cycle=%(cycle_id)s | %(message)s",
                }
            },
            "filters": {
                "correlation": {
                    "()": "adaptwell.core.logging.CorrelationFilter",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": log_level,
                    "filters": ["correlation"],
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in NOISY_LOGGERS},
            "root": {
                "handlers": ["console"],
                "level": log_level,
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
