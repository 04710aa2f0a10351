"""Alert models for Grafana Alerting webhook payloads."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AlertStatus(str, Enum):
    """Known alert statuses sent by Grafana."""

    FIRING = "firing"
    RESOLVED = "resolved"


class GrafanaAlert(BaseModel):
    """Individual alert from a Grafana webhook notification."""

    status: str
    labels: dict[str, str]
    annotations: dict[str, str]
    # Timestamps are kept as received so they render verbatim
    starts_at: str = Field(alias="startsAt")
    ends_at: str = Field(alias="endsAt")
    values: dict[str, Any] | None = None
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str = ""
    silence_url: str = Field(default="", alias="silenceURL")
    dashboard_url: str | None = Field(default=None, alias="dashboardURL")
    panel_url: str | None = Field(default=None, alias="panelURL")
    image_url: str = Field(default="", alias="imageURL")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def alertname(self) -> str:
        """Get the alert name from labels."""
        return self.labels.get("alertname", "None")

    @property
    def summary(self) -> str:
        """Get the human summary from annotations."""
        return self.annotations.get("summary", "")

    @property
    def error(self) -> str | None:
        """Get the error detail Grafana attaches to failing rules."""
        return self.annotations.get("Error")

    @property
    def is_resolved(self) -> bool:
        return self.status == AlertStatus.RESOLVED.value

    @property
    def timestamp(self) -> str:
        """End time for resolved alerts, start time otherwise."""
        return self.ends_at if self.is_resolved else self.starts_at


class GrafanaWebhookPayload(BaseModel):
    """Webhook payload from Grafana Alerting."""

    receiver: str = ""
    status: str
    org_id: int = Field(default=0, alias="orgId")
    alerts: list[GrafanaAlert]
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(alias="externalURL")
    version: str = "1"
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")

    # Deprecated by Grafana, accepted but unused
    title: str | None = None
    state: str | None = None
    message: str | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def is_resolved(self) -> bool:
        return self.status == AlertStatus.RESOLVED.value
