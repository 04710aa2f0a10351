"""Suppression rules that drop alerts before they are rendered."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

import structlog

from alertgram.models.alerts import GrafanaAlert

logger = structlog.get_logger(__name__)

DATASOURCE_ERROR_ALERTNAME = "DatasourceError"


class SuppressionRule(ABC):
    """Base class for alert suppression rules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this rule."""
        pass

    @abstractmethod
    def matches(self, alert: GrafanaAlert) -> bool:
        """
        Determine if the alert should be dropped.

        Args:
            alert: The alert to check

        Returns:
            True if the alert is suppressed by this rule
        """
        pass


class DatasourceErrorRule(SuppressionRule):
    """Drops the alerts Grafana raises when a rule's data source query fails."""

    @property
    def name(self) -> str:
        return "datasource_error"

    def matches(self, alert: GrafanaAlert) -> bool:
        return alert.alertname == DATASOURCE_ERROR_ALERTNAME


def build_rules(ignore_datasource_error: bool = False) -> list[SuppressionRule]:
    """Build the suppression rules requested for a webhook call."""
    rules: list[SuppressionRule] = []
    if ignore_datasource_error:
        rules.append(DatasourceErrorRule())
    return rules


def select_alerts(
    alerts: Sequence[GrafanaAlert],
    rules: Iterable[SuppressionRule],
) -> list[GrafanaAlert]:
    """
    Return the alerts not matched by any suppression rule, in order.

    Args:
        alerts: Alerts from the webhook payload
        rules: Active suppression rules

    Returns:
        The alerts that should be rendered
    """
    rules = list(rules)
    selected: list[GrafanaAlert] = []

    for alert in alerts:
        rule = next((r for r in rules if r.matches(alert)), None)
        if rule is None:
            selected.append(alert)
            continue

        logger.debug(
            "Suppressed alert",
            rule=rule.name,
            alert_name=alert.alertname,
            fingerprint=alert.fingerprint,
        )

    return selected
