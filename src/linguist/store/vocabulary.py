from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ..models.word import VocabularyWord, WordDetail
from .blob import BlobStore
from .common import dump_items, load_json, save_json, validate_items


VOCABULARY_KEY = "linguist_vocab"

_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")


def clean_word(word: str) -> str:
    """Strip punctuation from a token taken from captured text."""

    return _PUNCTUATION_RE.sub("", word).strip()


def normalize_word(word: str) -> str:
    return clean_word(word).lower()


class VocabularyStore:
    """Vocabulary book. Newest words first, one entry per normalized word."""

    def __init__(self, blob: BlobStore) -> None:
        self._blob = blob
        self._words: list[VocabularyWord] = []

    def load(self) -> int:
        items = validate_items(VocabularyWord, load_json(self._blob, VOCABULARY_KEY), key=VOCABULARY_KEY)
        seen: set[str] = set()
        self._words = []
        for item in items:
            key = normalize_word(item.word)
            if key and key not in seen:
                seen.add(key)
                self._words.append(item)
        return len(self._words)

    def persist(self) -> bool:
        return save_json(self._blob, VOCABULARY_KEY, dump_items(self._words))

    def __len__(self) -> int:
        return len(self._words)

    def snapshot(self) -> list[VocabularyWord]:
        return list(self._words)

    def get(self, word: str) -> Optional[VocabularyWord]:
        key = normalize_word(word)
        for item in self._words:
            if normalize_word(item.word) == key:
                return item
        return None

    def contains(self, word: str) -> bool:
        return self.get(word) is not None

    def add(self, detail: WordDetail, now: datetime) -> VocabularyWord:
        """Save a word. Adding an existing word returns the stored entry unchanged.

        正規化すると空になる語（句読点のみ）は ValueError。
        """

        cleaned = clean_word(detail.word)
        if not cleaned:
            raise ValueError(f"not a word: {detail.word!r}")
        existing = self.get(cleaned)
        if existing is not None:
            return existing
        fields = detail.model_dump(include=set(WordDetail.model_fields))
        fields["word"] = cleaned
        entry = VocabularyWord(**fields, added_at=now)
        self._words.insert(0, entry)
        return entry

    def remove(self, word: str) -> bool:
        key = normalize_word(word)
        before = len(self._words)
        self._words = [item for item in self._words if normalize_word(item.word) != key]
        return len(self._words) != before

    def mark_practiced(self, word: str, now: datetime) -> Optional[VocabularyWord]:
        key = normalize_word(word)
        for index, item in enumerate(self._words):
            if normalize_word(item.word) == key:
                updated = item.model_copy(update={"last_practiced_at": now})
                self._words[index] = updated
                return updated
        return None
