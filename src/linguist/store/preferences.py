from __future__ import annotations

from pydantic import ValidationError

from ..config import settings
from ..logging import logger
from ..models.goals import UserGoals
from ..models.notification import PermissionState
from .blob import BlobStore
from .common import load_json, save_json


GOALS_KEY = "linguist_goals"
PERMISSION_KEY = "linguist_notification_permission"


def default_goals() -> UserGoals:
    return UserGoals(
        daily_new_words=settings.daily_new_words_goal,
        daily_reviews=settings.daily_reviews_goal,
    )


class PreferencesStore:
    """Daily goals and the notification permission of this device."""

    def __init__(self, blob: BlobStore) -> None:
        self._blob = blob
        self._goals = default_goals()
        self._permission = PermissionState.undetermined

    def load(self) -> None:
        raw_goals = load_json(self._blob, GOALS_KEY)
        if raw_goals is not None:
            try:
                self._goals = UserGoals.model_validate(raw_goals)
            except ValidationError as exc:
                logger.warning("store_load_invalid", key=GOALS_KEY, error_count=exc.error_count())
        raw_permission = load_json(self._blob, PERMISSION_KEY)
        if raw_permission is not None:
            try:
                self._permission = PermissionState(raw_permission)
            except ValueError:
                logger.warning("store_load_invalid", key=PERMISSION_KEY, error="unknown permission state")

    def goals(self) -> UserGoals:
        return self._goals

    def set_goals(self, goals: UserGoals) -> bool:
        self._goals = goals
        return save_json(self._blob, GOALS_KEY, goals.model_dump(mode="json", by_alias=True))

    def permission(self) -> PermissionState:
        return self._permission

    def set_permission(self, state: PermissionState) -> bool:
        self._permission = state
        return save_json(self._blob, PERMISSION_KEY, state.value)
