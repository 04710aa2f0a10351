"""Prometheus metrics for Alertgram."""

from prometheus_client import Counter, Histogram

ALERTS_RECEIVED = Counter(
    "alertgram_alerts_received_total",
    "Total number of alerts received",
    ["status"],
)

ALERTS_SUPPRESSED = Counter(
    "alertgram_alerts_suppressed_total",
    "Total number of alerts dropped by suppression rules",
)

MESSAGES_SENT = Counter(
    "alertgram_messages_sent_total",
    "Total number of Telegram deliveries",
    ["outcome"],
)

DELIVERY_DURATION = Histogram(
    "alertgram_delivery_duration_seconds",
    "Duration of Telegram sendMessage calls",
)
