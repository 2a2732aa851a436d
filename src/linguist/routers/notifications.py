from typing import Optional

from fastapi import APIRouter, HTTPException

from ..models.common import ApiModel
from ..models.notification import DeliveredNotification, PermissionState
from ..models.session import SessionRecord
from ..srs.service import notification_sink, review_service

router = APIRouter(tags=["notifications"])


class PermissionRequest(ApiModel):
    grant: bool = True


class PermissionResponse(ApiModel):
    state: PermissionState


class ActivationResponse(ApiModel):
    session_id: str
    session: Optional[SessionRecord] = None


@router.get("", response_model=list[DeliveredNotification], summary="未開封の通知")
async def pending_notifications() -> list[DeliveredNotification]:
    return notification_sink.pending()


@router.get("/permission", response_model=PermissionResponse)
async def get_permission() -> PermissionResponse:
    return PermissionResponse(state=notification_sink.permission_state())


@router.post("/permission", response_model=PermissionResponse, summary="通知の許可を要求")
async def request_permission(req: PermissionRequest) -> PermissionResponse:
    """Ask for notification consent. Once denied, the state stays denied."""
    return PermissionResponse(state=notification_sink.request_permission(grant=req.grant))


@router.post("/{notification_id}/activate", response_model=ActivationResponse, summary="通知を開いて対象セッションへ移動")
async def activate_notification(notification_id: str) -> ActivationResponse:
    session_id = notification_sink.activate(notification_id)
    if session_id is None:
        raise HTTPException(status_code=404, detail="notification not found")
    return ActivationResponse(session_id=session_id, session=review_service.sessions.get(session_id))
