"""Data models for Alertgram."""

from alertgram.models.alerts import (
    AlertStatus,
    GrafanaAlert,
    GrafanaWebhookPayload,
)
from alertgram.models.delivery import (
    DeliveryOutcome,
    DeliveryStatus,
)

__all__ = [
    "AlertStatus",
    "DeliveryOutcome",
    "DeliveryStatus",
    "GrafanaAlert",
    "GrafanaWebhookPayload",
]
