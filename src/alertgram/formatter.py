"""Render Grafana alerts as Telegram Markdown messages."""

import json
import math
from collections.abc import Sequence
from typing import Any

from alertgram.models.alerts import GrafanaAlert, GrafanaWebhookPayload

RESOLVED_MARKER = "✅"
FIRING_MARKER = "🔥"


def _json_value(value: Any) -> Any:
    # Integral floats render without a fraction, non-finite values as null
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            return int(value)
    return value


def render_values(values: dict[str, Any]) -> str:
    """Serialize a value map as compact JSON."""
    return json.dumps(
        {key: _json_value(value) for key, value in values.items()},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def status_marker(resolved: bool) -> str:
    return RESOLVED_MARKER if resolved else FIRING_MARKER


def render_header(payload: GrafanaWebhookPayload) -> str:
    """Render the batch status line and the originating Grafana URL."""
    marker = status_marker(payload.is_resolved)
    return (
        f"{marker} Grafana alerting status: *{payload.status}*\n"
        f"Site: {payload.external_url}\n\n"
    )


def render_alert(alert: GrafanaAlert) -> str:
    """
    Render one alert block.

    The block starts with a blank line and ends with a newline so blocks
    can be concatenated after the header.
    """
    marker = status_marker(alert.is_resolved)
    text = (
        f"\n{marker} Rule `{alert.alertname}` changed to *{alert.status}* "
        f"@ `{alert.timestamp}`: {alert.summary}\n"
    )

    if alert.values:
        text += f"Values: `{render_values(alert.values)}`\n"

    if not alert.is_resolved and alert.error:
        text += f"Error: {alert.error}\n"

    return text


def render_message(
    payload: GrafanaWebhookPayload,
    alerts: Sequence[GrafanaAlert] | None = None,
) -> str:
    """
    Render the full Telegram message for a webhook payload.

    Args:
        payload: The parsed webhook payload
        alerts: The alerts to include, defaults to every alert in the payload

    Returns:
        The message text
    """
    if alerts is None:
        alerts = payload.alerts

    return render_header(payload) + "".join(render_alert(alert) for alert in alerts)
