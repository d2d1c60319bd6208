"""Structured logging for the notification hub.

Public API:
    - configure_logging(): Initialize logging
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for dispatch-scoped logging
    - get_correlation_id(): Current correlation id

Example:
    from notification_hub.logging import get_module_logger, bind_request_context

    logger = get_module_logger()

    with bind_request_context(correlation_id="req-123", user_id="user-1"):
        logger.info("processing_request")
"""

from notification_hub.logging.setup import configure_logging, get_module_logger
from notification_hub.logging.context import bind_request_context, get_correlation_id
from notification_hub.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_request_context",
    "get_correlation_id",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
