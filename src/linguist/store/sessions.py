from __future__ import annotations

from typing import Iterable, Optional

from ..logging import logger
from ..models.session import SessionRecord
from .blob import BlobStore
from .common import dump_items, load_json, save_json, validate_items


SESSIONS_KEY = "linguist_sessions"


class SessionStore:
    """The single authoritative in-memory copy of all learning sessions.

    - 並び順は新しいものが先頭（新規レコードは先頭に追加）
    - 更新は常にレコード単位の置換。フィールド単位の部分更新はしない
    - 永続化は load/persist の境界でのみ行い、失敗してもメモリ上の状態は保持する
    """

    def __init__(self, blob: BlobStore) -> None:
        self._blob = blob
        self._records: dict[str, SessionRecord] = {}

    def load(self) -> int:
        items = validate_items(SessionRecord, load_json(self._blob, SESSIONS_KEY), key=SESSIONS_KEY)
        self._records = {}
        for record in items:
            # 同一 ID が重複していた場合は先に現れた（新しい）方を採用
            self._records.setdefault(record.id, record)
        logger.info("sessions_loaded", count=len(self._records))
        return len(self._records)

    def persist(self) -> bool:
        return save_json(self._blob, SESSIONS_KEY, dump_items(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._records

    def get(self, session_id: str) -> Optional[SessionRecord]:
        return self._records.get(session_id)

    def snapshot(self) -> list[SessionRecord]:
        return list(self._records.values())

    def upsert(self, record: SessionRecord) -> None:
        """Replace the record with the same id in place, or prepend it."""

        if record.id in self._records:
            self._records[record.id] = record
            return
        self._records = {record.id: record, **self._records}

    def replace_many(self, records: Iterable[SessionRecord]) -> int:
        """Replace existing records by id in one step. Unknown ids are ignored."""

        updates = {r.id: r for r in records if r.id in self._records}
        if updates:
            self._records = {sid: updates.get(sid, current) for sid, current in self._records.items()}
        return len(updates)
