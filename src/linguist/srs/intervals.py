"""Retention intervals of the forgetting curve."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from ..config import settings


EBBINGHAUS_INTERVALS: tuple[int, ...] = (1, 2, 4, 7, 15, 30)


class IntervalTable:
    """Immutable, ordered days-until-next-review per progression stage.

    段階（stage）が表の末尾を超えた場合は最後の値を返す（頭打ち）。
    外挿もエラーもしない。
    """

    __slots__ = ("_days",)

    def __init__(self, days: Iterable[int]) -> None:
        values = tuple(int(d) for d in days)
        if not values:
            raise ValueError("interval table must contain at least one entry")
        if any(d <= 0 for d in values):
            raise ValueError("interval table entries must be positive")
        if any(later < earlier for earlier, later in zip(values, values[1:])):
            raise ValueError("interval table must be non-decreasing")
        self._days = values

    @classmethod
    def from_settings(cls) -> "IntervalTable":
        return cls(settings.review_intervals)

    @property
    def days(self) -> tuple[int, ...]:
        return self._days

    @property
    def max_stage(self) -> int:
        return len(self._days) - 1

    def __len__(self) -> int:
        return len(self._days)

    def __repr__(self) -> str:
        return f"IntervalTable({list(self._days)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalTable):
            return NotImplemented
        return self._days == other._days

    def __hash__(self) -> int:
        return hash(self._days)

    def stage_for(self, review_count: int) -> int:
        return max(0, min(review_count, self.max_stage))

    def days_for(self, stage: int) -> int:
        return self._days[self.stage_for(stage)]

    def interval(self, stage: int) -> timedelta:
        return timedelta(days=self.days_for(stage))
