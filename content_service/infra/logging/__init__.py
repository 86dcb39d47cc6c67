"""Logging infrastructure.

Provides structured logging with:
- JSONL format with OpenTelemetry trace correlation
- Automatic context injection (request_id, user_id, etc.)
- Lazy evaluation for DEBUG messages

Basic usage:
    import logging

    from content_service.infra.logging import get_lazy_logger, set_log_context

    logger = logging.getLogger(__name__)
    lazy_logger = get_lazy_logger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Category created", extra={"category_id": 7})
    lazy_logger.debug(lambda: f"Forest: {describe(tree)}")  # only runs if DEBUG enabled
"""

from content_service.infra.logging.config import build_logging_config, setup_logging
from content_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from content_service.infra.logging.formatters import JSONFormatter
from content_service.infra.logging.lazy import (
    LazyLoggerAdapter,
    get_lazy_logger,
)

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "build_logging_config",
    "clear_log_context",
    "get_lazy_logger",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
]
