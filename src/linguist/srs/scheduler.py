"""Review scheduling along the interval table.

すべて純粋関数。入力のレコードは変更せず、更新後のコピーを返す。
ストアへの書き戻しは呼び出し側（ReviewService）の責務。
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..id_factory import generate_session_id
from ..models.session import SessionContent, SessionRecord
from .intervals import IntervalTable


def start_session(
    content: SessionContent,
    now: datetime,
    table: IntervalTable,
    *,
    session_id: Optional[str] = None,
) -> SessionRecord:
    """Build the pre-review draft for freshly captured content."""

    return SessionRecord(
        **content.model_dump(include=set(SessionContent.model_fields)),
        id=session_id or generate_session_id(),
        created_at=now,
        review_count=0,
        next_review_at=now + table.interval(0),
    )


def stage_of(record: SessionRecord, table: IntervalTable) -> int:
    return table.stage_for(record.review_count)


def complete_review(
    record: Optional[SessionRecord],
    outcome_time: datetime,
    table: IntervalTable,
    *,
    template: Optional[SessionRecord] = None,
) -> SessionRecord:
    """Apply one completed review cycle and return the updated record.

    - record が None: 初回完了。template（下書き）の内容と ID を引き継ぎ、
      review_count=1、次回は表の先頭の日数後。
    - record あり: 段階は min(review_count + 1, max_stage) に頭打ちし、
      review_count 自体は上限なしで +1 する。通知の透かしはクリアする。
      そのため 2 回目の完了は表の index 2 を使い、index 1 は使われない。

    Every completion counts as a successful recall; intervals only grow.
    """

    if record is None:
        base = template or SessionRecord(
            id=generate_session_id(),
            created_at=outcome_time,
            next_review_at=outcome_time,
        )
        return base.model_copy(
            update={
                "review_count": 1,
                "last_reviewed_at": outcome_time,
                "next_review_at": outcome_time + table.interval(0),
                "last_notified_at": None,
            }
        )

    new_stage = table.stage_for(record.review_count + 1)
    candidate = outcome_time + table.interval(new_stage)
    # 時計が巻き戻っても next_review_at は後退させない
    next_review_at = max(candidate, record.next_review_at)
    return record.model_copy(
        update={
            "review_count": record.review_count + 1,
            "last_reviewed_at": outcome_time,
            "next_review_at": next_review_at,
            "last_notified_at": None,
        }
    )
