from fastapi import APIRouter, Depends
from app.modules.replay.schemas import ReplayRequest, ReplayResponse
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import Session
from app.core.dependencies import get_optional_session, get_synced_observer
from typing import Optional

router = APIRouter(prefix="/replay", tags=["replay"])


@router.post("", response_model=ReplayResponse)
async def replay_pending_action(
    replay_request: ReplayRequest,
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_synced_observer)
):
    """Called by a page for its own subject: replays a matching pending intent at most once"""
    result = observer.replay(replay_request.kind, replay_request.subject_id, session)
    return ReplayResponse(result=result, session=observer.snapshot(drain=True))
