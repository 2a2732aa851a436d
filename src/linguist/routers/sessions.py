from functools import partial

import anyio
from fastapi import APIRouter, HTTPException

from ..flows.analysis import build_analysis_flow
from ..models.session import CaptureRequest, SessionContent, SessionListResponse, SessionRecord
from ..srs.service import review_service

router = APIRouter(tags=["sessions"])


@router.post("/capture", response_model=SessionRecord, summary="取り込んだ内容から学習セッションの下書きを作成")
async def capture_session(req: CaptureRequest) -> SessionRecord:
    """Create a pre-review draft. The draft is stored once its first review completes.

    画像のみが送られた場合は解析サービスで文字を抽出してから下書きを作る。
    """
    text = req.extracted_text.strip()
    if not text and req.original_image:
        flow = build_analysis_flow()
        text = await anyio.to_thread.run_sync(partial(flow.extract_text, req.original_image, req.mime_type))
    if not text:
        raise HTTPException(status_code=422, detail="extractedText or originalImage is required")
    content = SessionContent(extracted_text=text, original_image=req.original_image)
    return review_service.capture(content)


@router.get("", response_model=SessionListResponse, summary="全セッションを次回復習日時の昇順で取得")
async def list_sessions() -> SessionListResponse:
    items = review_service.schedule()
    return SessionListResponse(count=len(items), items=items)


@router.get("/{session_id}", response_model=SessionRecord)
async def get_session(session_id: str) -> SessionRecord:
    record = review_service.sessions.get(session_id)
    if record is None:
        raise HTTPException(status_code=404, detail="session not found")
    return record
