"""Review service: the seam between the HTTP layer and the pure engine.

純粋関数（scheduler/due/goals）にストアのスナップショットと現在時刻を
明示的に渡し、結果をストアへ書き戻す。
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .. import store
from ..clock import Clock, SystemClock
from ..config import settings
from ..logging import logger
from ..models.goals import DailyProgress, UserGoals
from ..models.notification import TickResult
from ..models.session import SessionContent, SessionRecord
from ..models.word import VocabularyWord, WordDetail
from ..notifications import OutboxNotificationSink
from ..store.preferences import PreferencesStore
from ..store.sessions import SessionStore
from ..store.vocabulary import VocabularyStore
from .due import due_sessions, sort_by_next_review
from .goals import daily_progress
from .intervals import IntervalTable
from .notifier import NotifierGate
from .scheduler import complete_review, stage_of, start_session
from .ticker import ReviewTicker


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """IANA 名からタイムゾーンを解決する。未設定・不明ならホストのローカル時刻。"""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("timezone_unknown", timezone=name)
        return None


class ReviewService:
    def __init__(
        self,
        sessions: SessionStore,
        vocabulary: VocabularyStore,
        preferences: PreferencesStore,
        gate: NotifierGate,
        *,
        clock: Clock,
        table: IntervalTable,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.sessions = sessions
        self.vocabulary = vocabulary
        self.preferences = preferences
        self.gate = gate
        self.clock = clock
        self.table = table
        self.tz = tz

    # --- session lifecycle ---
    def capture(self, content: SessionContent) -> SessionRecord:
        """Create the pre-review draft. Drafts are not stored until finished."""

        draft = start_session(content, self.clock.now(), self.table)
        logger.info("session_captured", session_id=draft.id, text_chars=len(draft.extracted_text))
        return draft

    def finish(self, session: SessionRecord) -> SessionRecord:
        """Complete a review cycle for a draft or a stored session."""

        existing = self.sessions.get(session.id)
        updated = complete_review(existing, self.clock.now(), self.table, template=session)
        self.sessions.upsert(updated)
        persisted = self.sessions.persist()
        logger.info(
            "review_completed",
            session_id=updated.id,
            first_review=existing is None,
            review_count=updated.review_count,
            stage=stage_of(updated, self.table),
            next_review_at=updated.next_review_at.isoformat(),
            persisted=persisted,
        )
        return updated

    def review(self, session_id: str) -> Optional[SessionRecord]:
        existing = self.sessions.get(session_id)
        if existing is None:
            return None
        return self.finish(existing)

    # --- queries ---
    def schedule(self) -> list[SessionRecord]:
        return sort_by_next_review(self.sessions.snapshot())

    def due(self) -> list[SessionRecord]:
        return sort_by_next_review(due_sessions(self.sessions.snapshot(), self.clock.now()))

    def progress(self) -> DailyProgress:
        return daily_progress(
            self.vocabulary.snapshot(),
            self.sessions.snapshot(),
            self.preferences.goals(),
            self.clock.now(),
            self.tz,
        )

    def tick(self) -> TickResult:
        return self.gate.tick(self.clock.now())

    # --- goals & vocabulary ---
    def update_goals(self, goals: UserGoals) -> UserGoals:
        self.preferences.set_goals(goals)
        logger.info("goals_updated", daily_new_words=goals.daily_new_words, daily_reviews=goals.daily_reviews)
        return goals

    def add_word(self, detail: WordDetail) -> VocabularyWord:
        entry = self.vocabulary.add(detail, self.clock.now())
        self.vocabulary.persist()
        return entry

    def remove_word(self, word: str) -> bool:
        removed = self.vocabulary.remove(word)
        if removed:
            self.vocabulary.persist()
        return removed

    def mark_practiced(self, word: str) -> Optional[VocabularyWord]:
        entry = self.vocabulary.mark_practiced(word, self.clock.now())
        if entry is not None:
            self.vocabulary.persist()
        return entry


# module-level singletons (wired to settings)
clock = SystemClock()
notification_sink = OutboxNotificationSink(store.preferences)
notifier_gate = NotifierGate(store.sessions, notification_sink)
review_service = ReviewService(
    store.sessions,
    store.vocabulary,
    store.preferences,
    notifier_gate,
    clock=clock,
    table=IntervalTable.from_settings(),
    tz=resolve_timezone(settings.local_timezone),
)
review_ticker = ReviewTicker(notifier_gate, clock, settings.review_tick_seconds)
