from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .common import ApiModel, UtcDatetime


class PermissionState(str, Enum):
    granted = "granted"
    denied = "denied"
    undetermined = "undetermined"


class Alert(ApiModel):
    """Aggregate due-review alert. `session_id` is the first due item."""

    title: str
    body: str
    tag: str
    session_id: str
    due_count: int
    issued_at: UtcDatetime


class DeliveredNotification(Alert):
    id: str
    activated: bool = False


class TickResult(ApiModel):
    """Outcome of one Notifier Gate tick."""

    checked_at: UtcDatetime
    suppressed: bool = False
    alert: Optional[Alert] = None
    notified_ids: list[str] = Field(default_factory=list)
    delivery_failed: bool = False
