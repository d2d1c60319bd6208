"""Operation status enumeration."""

from enum import Enum


class OperationStatus(Enum):
    """Outcome classes for administrative operations such as cancel and retry.

    Attributes:
        SUCCESS: Operation completed
        TRANSIENT_ERROR: May succeed if attempted again later
        PERMANENT_ERROR: Will not succeed without a change of state
        NOT_FOUND: Target request or resource does not exist
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
