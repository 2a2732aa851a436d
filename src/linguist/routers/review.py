from fastapi import APIRouter, HTTPException

from ..models.notification import TickResult
from ..models.session import SessionListResponse, SessionRecord
from ..srs.service import review_service

router = APIRouter(tags=["review"])


@router.post("/complete", response_model=SessionRecord, summary="学習/復習サイクルを完了して次回日時を更新")
async def complete_review(session: SessionRecord) -> SessionRecord:
    """Finish a draft (first review) or a stored session (next stage)."""
    return review_service.finish(session)


@router.post("/{session_id}/complete", response_model=SessionRecord, summary="保存済みセッションの復習を完了")
async def complete_review_by_id(session_id: str) -> SessionRecord:
    updated = review_service.review(session_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="session not found")
    return updated


@router.get("/due", response_model=SessionListResponse, summary="現在復習期限のセッション")
async def due_sessions() -> SessionListResponse:
    items = review_service.due()
    return SessionListResponse(count=len(items), items=items)


@router.post("/tick", response_model=TickResult, summary="期限チェックを即時実行")
async def run_tick() -> TickResult:
    """Run one Notifier Gate tick now (the background ticker does the same)."""
    return review_service.tick()
