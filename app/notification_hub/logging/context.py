"""Dispatch context binding for structured logging.

Every log line emitted while a notification is being dispatched carries
its request id, target user and correlation id, including lines written
by channel providers running on worker threads.

Usage:
    from notification_hub.logging import bind_request_context

    with bind_request_context(correlation_id="req-123", user_id="user-1"):
        logger.info("dispatching")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind dispatch-scoped context to all logs within the block.

    Args:
        correlation_id: Caller supplied trace id. Generated if omitted.
        user_id: Target user of the notification.
        request_id: Notification request id.
        **extra_context: Additional key-value pairs to include.

    Yields:
        None - context is bound to structlog's context vars.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    if user_id is not None:
        context["user_id"] = user_id

    if request_id is not None:
        context["request_id"] = request_id

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the correlation id bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("correlation_id")
