from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..models.session import SessionRecord


def is_due(record: SessionRecord, now: datetime) -> bool:
    return record.next_review_at <= now


def was_notified(record: SessionRecord) -> bool:
    """True when an alert was already issued for the current due crossing."""

    return record.last_notified_at is not None and record.last_notified_at >= record.next_review_at


def due_sessions(records: Iterable[SessionRecord], now: datetime) -> list[SessionRecord]:
    """Records whose next review time has passed, in input order."""

    return [r for r in records if is_due(r, now)]


def newly_due(records: Iterable[SessionRecord], now: datetime) -> list[SessionRecord]:
    """Due records that have not been alerted for this cycle yet."""

    return [r for r in records if is_due(r, now) and not was_notified(r)]


def sort_by_next_review(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    return sorted(records, key=lambda r: r.next_review_at)
