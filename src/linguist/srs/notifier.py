"""Notifier Gate: decides whether due sessions raise a new alert.

配信方法には関与せず、「通知するか」「どの内容で」だけを決める。
透かし（last_notified_at）により同じ期限到来で二重に通知しない。
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol

from ..config import settings
from ..logging import logger
from ..models.notification import Alert, PermissionState, TickResult
from ..models.session import SessionRecord
from ..store.sessions import SessionStore
from .due import newly_due


class NotificationSink(Protocol):
    def permission_state(self) -> PermissionState:
        ...

    def request_permission(self) -> PermissionState:
        ...

    def deliver(self, alert: Alert) -> Optional[str]:
        ...


def build_alert(due: list[SessionRecord], now: datetime) -> Optional[Alert]:
    """One aggregate alert for all newly due sessions, pointing at the first."""

    if not due:
        return None
    return Alert(
        title=settings.notification_title,
        body=settings.notification_body.format(count=len(due)),
        tag=settings.notification_tag,
        session_id=due[0].id,
        due_count=len(due),
        issued_at=now,
    )


def mark_notified(records: Iterable[SessionRecord], now: datetime) -> list[SessionRecord]:
    """Return copies of the records with the watermark set to `now`."""

    return [r.model_copy(update={"last_notified_at": now}) for r in records]


class NotifierGate:
    def __init__(self, store: SessionStore, sink: NotificationSink) -> None:
        self._store = store
        self._sink = sink

    def tick(self, now: datetime) -> TickResult:
        """Check for newly due sessions and alert at most once per due crossing.

        許可が無い場合は何も変更せずに終了する（エラーにしない）。
        配信に失敗しても透かしは進める。判断は確定であり、次の tick が
        新しい状態から改めて判断する。
        """

        if self._sink.permission_state() is not PermissionState.granted:
            logger.debug("notification_suppressed", reason="permission_not_granted")
            return TickResult(checked_at=now, suppressed=True)

        records = self._store.snapshot()
        due = newly_due(records, now)
        alert = build_alert(due, now)
        if alert is None:
            return TickResult(checked_at=now)

        delivery_failed = False
        try:
            self._sink.deliver(alert)
        except Exception as exc:
            delivery_failed = True
            logger.warning(
                "notification_delivery_failed",
                error_type=type(exc).__name__,
                error=str(exc)[:200],
            )

        notified = mark_notified(due, now)
        self._store.replace_many(notified)
        self._store.persist()
        logger.info(
            "review_tick",
            due_count=len(due),
            first_session_id=alert.session_id,
            delivery_failed=delivery_failed,
        )
        return TickResult(
            checked_at=now,
            alert=alert,
            notified_ids=[r.id for r in notified],
            delivery_failed=delivery_failed,
        )
