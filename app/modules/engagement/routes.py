from fastapi import APIRouter, BackgroundTasks, Depends
from app.modules.engagement.schemas import TrackRequest, TrackResponse
from app.modules.engagement.service import ActionThrottle, EngagementRecorder
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import Session
from app.core.dependencies import (
    get_action_throttle, get_client_id, get_engagement_recorder, get_optional_session, get_session_observer
)
from typing import Optional

router = APIRouter(prefix="/engagement", tags=["engagement"])


@router.post("/track", response_model=TrackResponse, status_code=202)
async def track_engagement(
    track_request: TrackRequest,
    background_tasks: BackgroundTasks,
    client_id: str = Depends(get_client_id),
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_session_observer),
    recorder: EngagementRecorder = Depends(get_engagement_recorder),
    throttle: ActionThrottle = Depends(get_action_throttle)
):
    """Fire-and-forget: the write runs after the response and its failures are only logged"""
    if track_request.element_id and not throttle.try_acquire(f"{client_id}:{track_request.element_id}"):
        return TrackResponse(accepted=False, throttled=True)

    same_user = session is not None and observer.session is not None and observer.session.user_id == session.user_id
    background_tasks.add_task(
        recorder.track,
        track_request.action_type,
        track_request.additional_data,
        track_request.feature_name,
        observer.session if same_user else session,
        observer.profile_complete if same_user else False,
    )
    return TrackResponse(accepted=True, session_id=recorder.session_correlation_id())
