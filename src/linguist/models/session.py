from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from .common import ApiModel, UtcDatetime
from .word import WordDetail


class SessionContent(ApiModel):
    """Captured learning content. Opaque to the scheduler."""

    original_image: Optional[str] = None
    extracted_text: str = ""
    words: list[WordDetail] = Field(default_factory=list)
    user_translation: str = ""
    ai_translation: str = ""
    ai_comparison: str = ""


class SessionRecord(SessionContent):
    """One learning session and its review scheduling state.

    - review_count: 完了した復習サイクル数（上限なしのカウンタ）
    - next_review_at: この時刻を過ぎると復習期限（due）
    - last_notified_at: 通知済みの透かし。next_review_at 以上なら再通知しない
    """

    id: str = Field(min_length=1)
    created_at: UtcDatetime
    review_count: int = Field(default=0, ge=0)
    next_review_at: UtcDatetime
    last_reviewed_at: Optional[UtcDatetime] = None
    last_notified_at: Optional[UtcDatetime] = None

    @field_validator("last_notified_at", mode="before")
    @classmethod
    def _zero_means_unset(cls, value: object) -> object:
        # 旧形式の保存データでは 0 を「未通知」として扱っていた
        if value in (0, "0", ""):
            return None
        return value


class CaptureRequest(ApiModel):
    """Content captured by the user: text directly, or an image to read it from."""

    extracted_text: str = ""
    original_image: Optional[str] = None
    mime_type: str = "image/png"


class SessionListResponse(ApiModel):
    count: int
    items: list[SessionRecord]
