"""Delivery outcome models for Telegram fan-out."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeliveryStatus(str, Enum):
    """Settlement state of a single delivery."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class DeliveryOutcome(BaseModel):
    """Result of sending the rendered message to one chat."""

    chat_id: str
    status: DeliveryStatus
    code: int | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    reason: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def failed(self) -> bool:
        return self.status == DeliveryStatus.REJECTED
