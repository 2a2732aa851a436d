"""Single-device notification sink.

ブラウザの Notification API に相当する受け口。許可状態は PreferencesStore に
保存し、配信された通知はクライアントがポーリングする outbox に積む。
配信の保証はしない（ベストエフォート）。
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional

from .id_factory import generate_notification_id
from .logging import logger
from .models.notification import Alert, DeliveredNotification, PermissionState
from .store.preferences import PreferencesStore


OUTBOX_LIMIT = 50


class OutboxNotificationSink:
    def __init__(self, preferences: PreferencesStore, *, limit: int = OUTBOX_LIMIT) -> None:
        self._preferences = preferences
        self._limit = max(1, limit)
        self._outbox: "OrderedDict[str, DeliveredNotification]" = OrderedDict()

    # --- permission ---
    def permission_state(self) -> PermissionState:
        return self._preferences.permission()

    def request_permission(self, grant: bool = True) -> PermissionState:
        """Ask for consent. A denied permission stays denied until reset."""

        current = self._preferences.permission()
        if current is not PermissionState.undetermined:
            return current
        state = PermissionState.granted if grant else PermissionState.denied
        self._preferences.set_permission(state)
        logger.info("notification_permission_changed", state=state.value)
        return state

    def reset_permission(self) -> None:
        self._preferences.set_permission(PermissionState.undetermined)

    # --- delivery ---
    def deliver(self, alert: Alert) -> Optional[str]:
        """Queue the alert, replacing any earlier one with the same tag."""

        for existing_id, item in list(self._outbox.items()):
            if item.tag == alert.tag:
                del self._outbox[existing_id]
        notification = DeliveredNotification(**alert.model_dump(), id=generate_notification_id())
        self._outbox[notification.id] = notification
        while len(self._outbox) > self._limit:
            self._outbox.popitem(last=False)
        logger.info(
            "notification_delivered",
            notification_id=notification.id,
            tag=alert.tag,
            due_count=alert.due_count,
            session_id=alert.session_id,
        )
        return notification.id

    def pending(self) -> list[DeliveredNotification]:
        return [item for item in self._outbox.values() if not item.activated]

    def activate(self, notification_id: str) -> Optional[str]:
        """Mark the notification as opened and return the session to route to."""

        item = self._outbox.get(notification_id)
        if item is None:
            return None
        self._outbox[notification_id] = item.model_copy(update={"activated": True})
        logger.info("notification_activated", notification_id=notification_id, session_id=item.session_id)
        return item.session_id
