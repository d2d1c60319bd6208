"""Exceptions raised by the notification hub.

Only request-shape problems and missing templates reach callers of the
dispatcher. Provider failures are caught per channel and recorded as
failed outcomes, and policy skips are not errors at all.
"""

from typing import Optional


class NotificationError(Exception):
    """Base exception for all notification hub errors.

    Example:
        try:
            dispatcher.send(request)
        except NotificationError as e:
            logger.error("notification_error", error=str(e))
    """

    pass


class ValidationError(NotificationError, ValueError):
    """Raised when a required field is missing or malformed.

    Raised synchronously, before any side effect.

    Example:
        >>> webhook_channel.register_webhook("", secret=None, event_types=[])
        Traceback (most recent call last):
        ...
        ValidationError: Webhook URL is required
    """

    pass


class InvalidChannelError(ValidationError):
    """Raised when a channel value is not one of the known channels."""

    def __init__(self, channel: object):
        self.channel = channel
        super().__init__(f"Unknown notification channel: {channel!r}")


class NotFoundError(NotificationError, LookupError):
    """Raised when a looked-up entity does not exist."""

    pass


class TemplateNotFoundError(NotFoundError):
    """Raised when no template exists for a key in any language.

    Example:
        >>> renderer.render("missing", {}, "en-US")
        Traceback (most recent call last):
        ...
        TemplateNotFoundError: Template 'missing' not found
    """

    def __init__(self, template_key: str, language: Optional[str] = None):
        self.template_key = template_key
        self.language = language
        if language:
            message = f"Template '{template_key}' not found for language '{language}'"
        else:
            message = f"Template '{template_key}' not found"
        super().__init__(message)


class ProviderError(NotificationError):
    """Raised by a channel provider when delivery hard-fails.

    Attributes:
        channel: Channel value of the failing provider
        status_code: Upstream status code, when the backend returned one
    """

    def __init__(
        self, message: str, channel: str, status_code: Optional[int] = None
    ):
        self.channel = channel
        self.status_code = status_code
        super().__init__(message)
