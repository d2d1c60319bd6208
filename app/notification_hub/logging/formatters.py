"""Structlog processors applied to every log entry.

Recipient details and webhook secrets routinely pass through dispatch
logs, so both processors run in the default pipeline built by
``configure_logging``.
"""

from typing import Any

# Key fragments whose values are never written to logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "authorization",
        "signature",
        "credential",
        "phone_number",
    }
)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks values of sensitive keys.

    Matching is a case-insensitive substring test on the key, so
    ``webhook_secret`` and ``device_tokens`` are both masked.

    Args:
        mask_value: Replacement for masked values.
        additional_patterns: Extra key fragments to treat as sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked = {}
        for key, value in event_dict.items():
            if value is not None and any(p in key.lower() for p in patterns):
                masked[key] = mask_value
            else:
                masked[key] = value
        return masked

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that shortens oversized string values.

    Rendered HTML bodies can be large; anything longer than ``max_length``
    is cut and annotated with its original size.

    Args:
        max_length: Maximum string length kept verbatim.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
