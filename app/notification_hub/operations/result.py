"""Uniform result type for operations that report rather than raise."""

from dataclasses import dataclass
from typing import Any, Optional

from notification_hub.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Result of an operation that must not throw.

    ``cancel`` and ``retry`` on the dispatcher return one of these so
    that callers can branch on ``is_success`` and ``error_code``.

    Attributes:
        status: High-level outcome
        message: Human-friendly message for logs
        data: Optional payload
        error_code: Optional machine error code (e.g. NOT_CANCELLABLE)
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def transient_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        return cls(
            status=OperationStatus.TRANSIENT_ERROR,
            message=message,
            error_code=error_code,
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Create a non-retryable error result.

        Used when the target exists but is not in a state that allows the
        operation, for example cancelling a request that already ran.
        """
        return cls(
            status=OperationStatus.PERMANENT_ERROR,
            message=message,
            error_code=error_code,
        )

    @classmethod
    def not_found(cls, message: str) -> "OperationResult":
        return cls(
            status=OperationStatus.NOT_FOUND, message=message, error_code="NOT_FOUND"
        )
