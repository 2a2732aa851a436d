from __future__ import annotations

from typing import Optional

from pydantic import Field

from .common import ApiModel, UtcDatetime


class BilingualText(ApiModel):
    en: str
    zh: str


class WordDetail(ApiModel):
    """Analysis of one word in the context it was captured from."""

    word: str = Field(min_length=1)
    phonetic: str = ""
    definitions: list[BilingualText] = Field(default_factory=list)
    examples: list[BilingualText] = Field(default_factory=list)


class VocabularyWord(WordDetail):
    """A word saved to the vocabulary book.

    `added_at` は今日の新語数の集計に使う。
    """

    added_at: UtcDatetime
    last_practiced_at: Optional[UtcDatetime] = None
