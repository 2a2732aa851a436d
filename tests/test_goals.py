import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from linguist.models import SessionRecord, UserGoals, VocabularyWord
from linguist.srs.goals import daily_counts, daily_progress, goal_progress, start_of_day

TZ = timezone(timedelta(hours=8))


def _word(word, added_at):
    return VocabularyWord(word=word, added_at=added_at)


def _reviewed(session_id, at):
    return SessionRecord(id=session_id, created_at=at, review_count=1, next_review_at=at, last_reviewed_at=at)


def test_start_of_day_uses_given_timezone():
    now = datetime(2024, 3, 1, 17, 30, tzinfo=timezone.utc)  # 01:30 next day at UTC+8
    assert start_of_day(now, TZ) == datetime(2024, 3, 2, 0, 0, tzinfo=TZ)


def test_counts_respect_local_midnight():
    midnight = datetime(2024, 3, 2, 0, 0, tzinfo=TZ)
    vocab = [
        _word("before", midnight - timedelta(seconds=1)),
        _word("at", midnight),
        _word("after", midnight + timedelta(hours=3)),
    ]
    sessions = [
        _reviewed("old", midnight - timedelta(minutes=1)),
        _reviewed("today", midnight + timedelta(hours=1)),
        SessionRecord(id="draft", created_at=midnight, next_review_at=midnight),
    ]
    assert daily_counts(vocab, sessions, midnight + timedelta(hours=5), TZ) == (2, 1)


def test_goal_percentage_is_rounded_and_capped():
    assert goal_progress(3, 5).percentage == 60
    assert goal_progress(3, 5).completed is False
    assert goal_progress(5, 5).percentage == 100
    assert goal_progress(5, 5).completed is True
    assert goal_progress(6, 5).percentage == 100
    assert goal_progress(1, 8).percentage == 13  # 12.5 rounds half up
    assert goal_progress(0, 10).percentage == 0


def test_zero_goal_counts_as_completed():
    progress = goal_progress(0, 0)
    assert progress.percentage == 100
    assert progress.completed is True


def test_daily_progress_combines_both_goals():
    now = datetime(2024, 3, 2, 12, 0, tzinfo=TZ)
    vocab = [_word(f"w{i}", now - timedelta(hours=1)) for i in range(5)]
    sessions = [_reviewed("s1", now - timedelta(hours=2))]
    progress = daily_progress(vocab, sessions, UserGoals(daily_new_words=5, daily_reviews=2), now, TZ)
    assert progress.new_words.completed is True
    assert progress.reviews.percentage == 50
    assert progress.all_completed is False

    sessions.append(_reviewed("s2", now))
    progress = daily_progress(vocab, sessions, UserGoals(daily_new_words=5, daily_reviews=2), now, TZ)
    assert progress.all_completed is True


@pytest.fixture()
def host_tz_berlin(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_host_local_midnight_on_dst_change_day(host_tz_berlin):
    # 2024-03-31: Berlin switches from +01:00 to +02:00 at 02:00 local time
    now = datetime(2024, 3, 31, 10, 0, tzinfo=timezone.utc)
    midnight = start_of_day(now)
    assert midnight == datetime(2024, 3, 30, 23, 0, tzinfo=timezone.utc)

    late_yesterday = _word("late", datetime(2024, 3, 30, 22, 30, tzinfo=timezone.utc))
    assert daily_counts([late_yesterday], [], now) == (0, 0)


def test_named_zone_midnight_on_dst_change_day():
    now = datetime(2024, 3, 31, 10, 0, tzinfo=timezone.utc)
    assert start_of_day(now, ZoneInfo("Europe/Berlin")) == datetime(2024, 3, 30, 23, 0, tzinfo=timezone.utc)
