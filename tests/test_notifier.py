from datetime import timedelta
from typing import Optional

from linguist.models import Alert, PermissionState, SessionRecord
from linguist.srs.notifier import NotifierGate, build_alert, mark_notified
from linguist.store import MemoryBlobStore, SessionStore


class RecordingSink:
    def __init__(self, state=PermissionState.granted, fail=False):
        self.state = state
        self.fail = fail
        self.alerts: list[Alert] = []

    def permission_state(self) -> PermissionState:
        return self.state

    def request_permission(self) -> PermissionState:
        return self.state

    def deliver(self, alert: Alert) -> Optional[str]:
        if self.fail:
            raise OSError("notification service unavailable")
        self.alerts.append(alert)
        return f"n{len(self.alerts)}"


def _store_with(t0, *specs):
    store = SessionStore(MemoryBlobStore())
    for session_id, next_in in specs:
        store.upsert(SessionRecord(id=session_id, created_at=t0, review_count=1, next_review_at=t0 + next_in))
    return store


def test_one_aggregate_alert_for_all_due_sessions(t0):
    # upsert prepends, so "b" is first in store order
    store = _store_with(t0, ("a", timedelta(hours=1)), ("b", timedelta(hours=2)), ("c", timedelta(days=2)))
    sink = RecordingSink()
    result = NotifierGate(store, sink).tick(t0 + timedelta(hours=3))

    assert len(sink.alerts) == 1
    alert = sink.alerts[0]
    assert alert.due_count == 2
    assert alert.session_id == "b"
    assert "2" in alert.body
    assert sorted(result.notified_ids) == ["a", "b"]
    assert store.get("a").last_notified_at == t0 + timedelta(hours=3)
    assert store.get("c").last_notified_at is None


def test_same_due_crossing_alerts_only_once(t0):
    store = _store_with(t0, ("a", timedelta(hours=1)))
    sink = RecordingSink()
    gate = NotifierGate(store, sink)
    now = t0 + timedelta(hours=2)

    first = gate.tick(now)
    second = gate.tick(now + timedelta(minutes=1))

    assert first.alert is not None
    assert second.alert is None
    assert len(sink.alerts) == 1


def test_alerts_again_after_review_and_next_due(t0):
    from linguist.srs.intervals import IntervalTable
    from linguist.srs.scheduler import complete_review

    table = IntervalTable([1, 2])
    store = _store_with(t0, ("a", timedelta(hours=1)))
    sink = RecordingSink()
    gate = NotifierGate(store, sink)
    gate.tick(t0 + timedelta(hours=2))

    reviewed = complete_review(store.get("a"), t0 + timedelta(hours=3), table)
    store.upsert(reviewed)
    gate.tick(reviewed.next_review_at + timedelta(minutes=1))
    assert len(sink.alerts) == 2


def test_no_permission_is_a_silent_no_op(t0):
    store = _store_with(t0, ("a", timedelta(hours=1)))
    for state in (PermissionState.denied, PermissionState.undetermined):
        sink = RecordingSink(state=state)
        result = NotifierGate(store, sink).tick(t0 + timedelta(hours=2))
        assert result.suppressed is True
        assert sink.alerts == []
        assert store.get("a").last_notified_at is None


def test_nothing_due_sends_nothing(t0):
    store = _store_with(t0, ("a", timedelta(days=1)))
    sink = RecordingSink()
    result = NotifierGate(store, sink).tick(t0)
    assert result.alert is None
    assert result.notified_ids == []
    assert sink.alerts == []


def test_delivery_failure_still_advances_watermark(t0):
    store = _store_with(t0, ("a", timedelta(hours=1)))
    gate = NotifierGate(store, RecordingSink(fail=True))
    now = t0 + timedelta(hours=2)

    result = gate.tick(now)

    assert result.delivery_failed is True
    assert result.notified_ids == ["a"]
    assert store.get("a").last_notified_at == now
    assert gate.tick(now + timedelta(minutes=1)).alert is None


def test_build_alert_uses_configured_text(t0):
    store = _store_with(t0, ("a", timedelta(0)))
    alert = build_alert(store.snapshot(), t0)
    assert alert.title == "LinguistPro: 学习时间到！"
    assert alert.body == "你有 1 项内容待复习。点击开始学习！"
    assert alert.tag == "linguist-review"
    assert build_alert([], t0) is None


def test_mark_notified_copies_every_record(t0):
    store = _store_with(t0, ("a", timedelta(0)), ("b", timedelta(0)))
    originals = store.snapshot()
    marked = mark_notified(originals, t0)
    assert [r.last_notified_at for r in marked] == [t0, t0]
    assert all(r.last_notified_at is None for r in originals)
