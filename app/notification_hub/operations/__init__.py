"""Operation result types."""

from notification_hub.operations.result import OperationResult
from notification_hub.operations.status import OperationStatus

__all__ = ["OperationResult", "OperationStatus"]
