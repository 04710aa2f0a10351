"""Shared fixtures for Alertgram tests."""

from typing import Any

import pytest

from alertgram.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Create settings with two destination chats."""
    return Settings(
        BOT_TOKEN="123:abc",
        TG_CHAT_IDS="1001,-1002",
        WEBHOOK_TOKEN="s3cret",
    )


def make_alert(**overrides: Any) -> dict[str, Any]:
    """Build a Grafana alert as it appears in the webhook JSON."""
    alert: dict[str, Any] = {
        "status": "firing",
        "labels": {"alertname": "HighCPU", "instance": "server1:9090"},
        "annotations": {"summary": "CPU above 90%"},
        "startsAt": "2024-01-01T00:00:00Z",
        "endsAt": "0001-01-01T00:00:00Z",
        "values": None,
        "generatorURL": "https://grafana.example.com/alerting/grafana/abc/view",
        "fingerprint": "abc123",
        "silenceURL": "https://grafana.example.com/alerting/silence/new",
        "imageURL": "",
    }
    alert.update(overrides)
    return alert


def make_payload(alerts: list[dict[str, Any]] | None = None, **overrides: Any) -> dict[str, Any]:
    """Build a Grafana webhook body."""
    payload: dict[str, Any] = {
        "receiver": "telegram",
        "status": "firing",
        "orgId": 1,
        "alerts": [make_alert()] if alerts is None else alerts,
        "groupLabels": {"alertname": "HighCPU"},
        "commonLabels": {"alertname": "HighCPU"},
        "commonAnnotations": {},
        "externalURL": "https://grafana.example.com/",
        "version": "1",
        "groupKey": '{}:{alertname="HighCPU"}',
        "truncatedAlerts": 0,
    }
    payload.update(overrides)
    return payload
