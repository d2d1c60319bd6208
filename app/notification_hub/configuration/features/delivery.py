"""Delivery and batching settings."""

from pydantic import Field

from notification_hub.configuration.base import FeatureSettings


class DeliverySettings(FeatureSettings):
    """Bulk batching, retry and fan-out limits.

    Environment Variables:
        DELIVERY_BATCH_SIZE: Upper bound on users resolved concurrently in one bulk wave
        DELIVERY_MAX_RETRY_ATTEMPTS: Attempts allowed per channel before retry() refuses
        DELIVERY_MAX_CHANNEL_WORKERS: Upper bound on concurrent channel attempts per send
        DELIVERY_HISTORY_LIMIT: Requests retained per user in the history store
    """

    DELIVERY_BATCH_SIZE: int = Field(default=100, alias="DELIVERY_BATCH_SIZE", gt=0)
    DELIVERY_MAX_RETRY_ATTEMPTS: int = Field(
        default=3, alias="DELIVERY_MAX_RETRY_ATTEMPTS", gt=0
    )
    DELIVERY_MAX_CHANNEL_WORKERS: int = Field(
        default=5, alias="DELIVERY_MAX_CHANNEL_WORKERS", gt=0
    )
    DELIVERY_HISTORY_LIMIT: int = Field(
        default=1000, alias="DELIVERY_HISTORY_LIMIT", gt=0
    )
