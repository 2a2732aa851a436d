"""Goal Progress Aggregator.

保存済みの状態を持たず、語彙とセッションから毎回その日の進捗を算出する。
"""

from __future__ import annotations

import math
from datetime import datetime, time, tzinfo
from typing import Iterable, Optional

from ..models.goals import DailyProgress, GoalProgress, UserGoals
from ..models.session import SessionRecord
from ..models.word import VocabularyWord


def start_of_day(now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of the calendar day containing `now`.

    tz を省略した場合はホストのローカル時刻で日付を判定する。
    """

    if tz is not None:
        return now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    # astimezone() は now 時点の固定オフセットを返すため、夏時間の切替日は
    # 日付から午前 0 時を組み立て直してオフセットを求め直す
    local_date = now.astimezone().date()
    return datetime.combine(local_date, time.min).astimezone()


def daily_counts(
    vocabulary: Iterable[VocabularyWord],
    sessions: Iterable[SessionRecord],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> tuple[int, int]:
    """Return (new_words, reviews_done) for the day containing `now`."""

    midnight = start_of_day(now, tz)
    new_words = sum(1 for v in vocabulary if v.added_at >= midnight)
    reviews_done = sum(
        1 for s in sessions if s.last_reviewed_at is not None and s.last_reviewed_at >= midnight
    )
    return new_words, reviews_done


def goal_progress(current: int, goal: int) -> GoalProgress:
    # 目標 0 以下は達成済みとして扱う（ゼロ除算回避）
    if goal <= 0:
        return GoalProgress(current=current, goal=goal, percentage=100, completed=True)
    # 四捨五入は 0.5 を切り上げる（銀行丸めにしない）
    percentage = min(math.floor(100 * current / goal + 0.5), 100)
    return GoalProgress(current=current, goal=goal, percentage=percentage, completed=current >= goal)


def daily_progress(
    vocabulary: Iterable[VocabularyWord],
    sessions: Iterable[SessionRecord],
    goals: UserGoals,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> DailyProgress:
    new_words, reviews_done = daily_counts(vocabulary, sessions, now, tz)
    words = goal_progress(new_words, goals.daily_new_words)
    reviews = goal_progress(reviews_done, goals.daily_reviews)
    return DailyProgress(
        new_words=words,
        reviews=reviews,
        all_completed=words.completed and reviews.completed,
    )
