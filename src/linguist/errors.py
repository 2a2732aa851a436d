"""Error taxonomy shared by the review engine and the analysis layer."""

from __future__ import annotations


class LinguistError(Exception):
    """Base class for recoverable application errors."""


class AnalysisServiceFailure(LinguistError):
    """The analysis service failed or returned output we could not validate.

    呼び出し元（UI/API）へは単一の失敗として伝える。エンジン側では再試行しない。
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class StoreUnavailable(LinguistError):
    """The persisted blob store could not be read or written."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"store unavailable for {key!r}: {reason}")
        self.key = key
        self.reason = reason
