from fastapi import APIRouter

from ..models.goals import DailyProgress, UserGoals
from ..srs.service import review_service

router = APIRouter(tags=["progress"])


@router.get("/progress", response_model=DailyProgress, summary="今日の新語・復習の進捗")
async def daily_progress() -> DailyProgress:
    """Today's counts against the daily goals. Recomputed on every call."""
    return review_service.progress()


@router.get("/goals", response_model=UserGoals)
async def get_goals() -> UserGoals:
    return review_service.preferences.goals()


@router.put("/goals", response_model=UserGoals)
async def put_goals(goals: UserGoals) -> UserGoals:
    return review_service.update_goals(goals)
