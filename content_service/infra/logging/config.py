"""Logging configuration setup.

Builds a ``logging.config.dictConfig`` dictionary from LoggingSettings:
JSON Lines or plain text on stderr, an optional rotating file, and the
ContextInjectingFilter on every handler. Application loggers propagate to
the root logger.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from content_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

_TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(log_settings: LoggingSettings | None = None, *, force: bool = False) -> None:
    """Configure logging once across entrypoints.

    Args:
        log_settings: Settings to apply; loaded via get_logging_settings()
            when omitted.
        force: Reconfigure even if logging was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from content_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    logging.config.dictConfig(build_logging_config(log_settings))
    if log_settings.capture_warnings:
        logging.captureWarnings(True)
    _LOGGING_INITIALIZED = True
    logger.debug("Logging configured", extra={"level": log_settings.level})


def build_logging_config(log_settings: LoggingSettings) -> dict[str, Any]:
    """Translate LoggingSettings into a dictConfig dictionary.

    Args:
        log_settings: Logging settings

    Returns:
        Configuration accepted by logging.config.dictConfig
    """
    formatter = "json" if log_settings.json_logs else "text"
    filters = ["context"] if log_settings.include_context else []

    handlers: dict[str, Any] = {}
    if log_settings.console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": log_settings.effective_console_level,
            "formatter": formatter,
            "filters": filters,
            "stream": "ext://sys.stderr",
        }
    if log_settings.file_path is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_settings.level,
            "formatter": formatter,
            "filters": filters,
            "filename": str(log_settings.file_path),
            "maxBytes": log_settings.file_max_bytes,
            "backupCount": log_settings.file_backup_count,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "content_service.infra.logging.formatters.JSONFormatter",
                "static": {"service": log_settings.service_name},
            },
            "text": {"format": _TEXT_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "filters": {
            "context": {"()": "content_service.infra.logging.context.ContextInjectingFilter"},
        },
        "handlers": handlers,
        "loggers": {
            # SQL echo is controlled by DB_ECHO, not the root level
            "sqlalchemy.engine": {"level": log_settings.sqlalchemy_level},
        },
        "root": {
            "level": log_settings.level,
            "handlers": list(handlers),
        },
    }
