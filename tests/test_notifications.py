from linguist.models import Alert, PermissionState
from linguist.notifications import OutboxNotificationSink
from linguist.store import MemoryBlobStore, PreferencesStore


def _sink(limit=50):
    prefs = PreferencesStore(MemoryBlobStore())
    return OutboxNotificationSink(prefs, limit=limit)


def _alert(t0, session_id="s1", tag="linguist-review", count=1):
    return Alert(title="t", body="b", tag=tag, session_id=session_id, due_count=count, issued_at=t0)


def test_permission_is_requested_once():
    sink = _sink()
    assert sink.permission_state() is PermissionState.undetermined
    assert sink.request_permission(grant=False) is PermissionState.denied
    # a denied permission is not re-asked
    assert sink.request_permission(grant=True) is PermissionState.denied
    sink.reset_permission()
    assert sink.request_permission() is PermissionState.granted


def test_same_tag_replaces_previous_alert(t0):
    sink = _sink()
    sink.deliver(_alert(t0, session_id="s1"))
    latest = sink.deliver(_alert(t0, session_id="s2", count=2))
    sink.deliver(_alert(t0, session_id="s3", tag="other"))
    pending = sink.pending()
    assert [n.session_id for n in pending] == ["s2", "s3"]
    assert pending[0].id == latest


def test_outbox_is_bounded(t0):
    sink = _sink(limit=2)
    for i in range(4):
        sink.deliver(_alert(t0, session_id=f"s{i}", tag=f"tag{i}"))
    assert [n.session_id for n in sink.pending()] == ["s2", "s3"]


def test_activate_routes_to_session(t0):
    sink = _sink()
    notification_id = sink.deliver(_alert(t0, session_id="s9"))
    assert sink.activate(notification_id) == "s9"
    assert sink.pending() == []
    assert sink.activate("nt:unknown") is None
