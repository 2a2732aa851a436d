from __future__ import annotations

from .common import ApiModel


class UserGoals(ApiModel):
    """Daily learning goals. Values <= 0 count as already satisfied."""

    daily_new_words: int
    daily_reviews: int


class GoalProgress(ApiModel):
    current: int
    goal: int
    percentage: int
    completed: bool


class DailyProgress(ApiModel):
    """Today's progress against both goals, derived on every request."""

    new_words: GoalProgress
    reviews: GoalProgress
    all_completed: bool
