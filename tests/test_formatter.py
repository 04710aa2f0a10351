"""Tests for message rendering and alert suppression."""

import pytest

from alertgram.filters import DatasourceErrorRule, build_rules, select_alerts
from alertgram.formatter import render_alert, render_header, render_message
from alertgram.models.alerts import GrafanaAlert, GrafanaWebhookPayload
from conftest import make_alert, make_payload


@pytest.fixture
def payload() -> GrafanaWebhookPayload:
    """Create a payload with one firing alert."""
    return GrafanaWebhookPayload.model_validate(make_payload())


class TestRenderer:
    """Tests for the message renderer."""

    def test_header(self, payload: GrafanaWebhookPayload) -> None:
        """Test the batch header line."""
        assert render_header(payload) == (
            "🔥 Grafana alerting status: *firing*\nSite: https://grafana.example.com/\n\n"
        )

    def test_resolved_header(self) -> None:
        """Test resolved batches use the resolved marker."""
        payload = GrafanaWebhookPayload.model_validate(make_payload(status="resolved"))

        assert render_header(payload).startswith("✅ Grafana alerting status: *resolved*")

    def test_firing_alert_line(self, payload: GrafanaWebhookPayload) -> None:
        """Test the line rendered for a firing alert."""
        assert render_alert(payload.alerts[0]) == (
            "\n🔥 Rule `HighCPU` changed to *firing* @ `2024-01-01T00:00:00Z`: CPU above 90%\n"
        )

    def test_resolved_alert_uses_end_time(self) -> None:
        """Test resolved alerts show their end time and hide errors."""
        alert = GrafanaAlert.model_validate(
            make_alert(
                status="resolved",
                endsAt="2024-01-01T00:05:00Z",
                annotations={"summary": "CPU back to normal", "Error": "timeout"},
            )
        )

        assert render_alert(alert) == (
            "\n✅ Rule `HighCPU` changed to *resolved* @ `2024-01-01T00:05:00Z`: "
            "CPU back to normal\n"
        )

    def test_values_and_error_lines(self) -> None:
        """Test values and error annotations are appended."""
        alert = GrafanaAlert.model_validate(
            make_alert(
                values={"B": 93.5, "C": 1},
                annotations={"summary": "CPU above 90%", "Error": "query failed"},
            )
        )

        lines = render_alert(alert).splitlines()
        assert lines[2] == 'Values: `{"B":93.5,"C":1}`'
        assert lines[3] == "Error: query failed"

    def test_integral_float_values(self) -> None:
        """Test whole-number floats render without a fraction."""
        alert = GrafanaAlert.model_validate(make_alert(values={"A": 1.0, "B": 0.25, "C": 3}))

        assert render_alert(alert).splitlines()[2] == 'Values: `{"A":1,"B":0.25,"C":3}`'

    def test_empty_values_skipped(self) -> None:
        """Test an empty value map adds no values line."""
        alert = GrafanaAlert.model_validate(make_alert(values={}))

        assert "Values:" not in render_alert(alert)

    def test_missing_name_and_summary(self) -> None:
        """Test fallbacks for a missing alertname and summary."""
        alert = GrafanaAlert.model_validate(make_alert(labels={}, annotations={}))

        assert render_alert(alert) == (
            "\n🔥 Rule `None` changed to *firing* @ `2024-01-01T00:00:00Z`: \n"
        )

    def test_empty_batch_renders_header_only(self) -> None:
        """Test a batch without alerts renders only the header."""
        payload = GrafanaWebhookPayload.model_validate(make_payload(alerts=[]))

        assert render_message(payload) == render_header(payload)

    def test_render_is_deterministic(self) -> None:
        """Test rendering the same payload twice gives identical text."""
        payload = GrafanaWebhookPayload.model_validate(
            make_payload(
                alerts=[
                    make_alert(values={"B": 93.5}),
                    make_alert(labels={"alertname": "DiskFull"}, status="resolved"),
                ]
            )
        )

        assert render_message(payload) == render_message(payload)

    def test_render_selected_alerts(self) -> None:
        """Test only the given alerts are rendered, in order."""
        payload = GrafanaWebhookPayload.model_validate(
            make_payload(
                alerts=[
                    make_alert(labels={"alertname": "First"}),
                    make_alert(labels={"alertname": "Second"}),
                ]
            )
        )

        message = render_message(payload, payload.alerts[1:])
        assert "`Second`" in message
        assert "`First`" not in message


class TestSuppression:
    """Tests for suppression rules."""

    def test_no_rules_by_default(self) -> None:
        """Test nothing is suppressed without the flag."""
        assert build_rules() == []

    def test_datasource_error_rule(self) -> None:
        """Test the data source error rule matches only its alert name."""
        rule = DatasourceErrorRule()
        noisy = GrafanaAlert.model_validate(make_alert(labels={"alertname": "DatasourceError"}))
        other = GrafanaAlert.model_validate(make_alert())

        assert rule.matches(noisy)
        assert not rule.matches(other)

    def test_select_alerts_drops_matches(self) -> None:
        """Test suppressed alerts are removed and order is kept."""
        alerts = [
            GrafanaAlert.model_validate(make_alert(labels={"alertname": "A"})),
            GrafanaAlert.model_validate(make_alert(labels={"alertname": "DatasourceError"})),
            GrafanaAlert.model_validate(make_alert(labels={"alertname": "B"})),
        ]

        selected = select_alerts(alerts, build_rules(ignore_datasource_error=True))

        assert [alert.alertname for alert in selected] == ["A", "B"]

    def test_select_alerts_without_rules(self) -> None:
        """Test every alert survives when no rule is active."""
        alerts = [GrafanaAlert.model_validate(make_alert(labels={"alertname": "DatasourceError"}))]

        assert select_alerts(alerts, build_rules()) == alerts
