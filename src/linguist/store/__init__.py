from __future__ import annotations

from ..config import settings
from ..errors import StoreUnavailable
from ..logging import logger
from .blob import BlobStore, MemoryBlobStore, SQLiteBlobStore
from .preferences import PreferencesStore
from .sessions import SessionStore
from .vocabulary import VocabularyStore, clean_word, normalize_word


def _create_blob_store() -> BlobStore:
    """設定に応じた blob ストアを初期化する。

    - ":memory:" の場合はプロセス内の辞書に保持する
    - SQLite を開けない場合もスケジューリングは継続できるよう、メモリ実装へ退避する
    """

    path = (settings.linguist_db_path or "").strip()
    if path in {"", ":memory:"}:
        return MemoryBlobStore()
    try:
        return SQLiteBlobStore(db_path=path)
    except StoreUnavailable as exc:
        if settings.strict_mode:
            raise
        logger.warning("store_open_failed", path=path, error=exc.reason)
        return MemoryBlobStore()


blob_store = _create_blob_store()
sessions = SessionStore(blob_store)
vocabulary = VocabularyStore(blob_store)
preferences = PreferencesStore(blob_store)
sessions.load()
vocabulary.load()
preferences.load()

__all__ = [
    "BlobStore",
    "MemoryBlobStore",
    "PreferencesStore",
    "SQLiteBlobStore",
    "SessionStore",
    "VocabularyStore",
    "blob_store",
    "clean_word",
    "normalize_word",
    "preferences",
    "sessions",
    "vocabulary",
]
