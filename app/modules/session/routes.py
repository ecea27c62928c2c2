from fastapi import APIRouter, Depends, HTTPException, status
from app.modules.intents.schemas import ActionKind
from app.modules.replay.schemas import ReplayResponse
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import (
    AuthEvent, AuthEventRequest, Session, SessionSnapshot, SessionState, SubjectRequest
)
from app.core.dependencies import get_optional_session, get_session_observer, get_synced_observer
from typing import Optional

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionSnapshot)
async def get_session_state(observer: SessionObserver = Depends(get_synced_observer)):
    """Current session state plus pending UI effects; effects are handed out once"""
    return observer.snapshot(drain=True)


@router.post("/events", response_model=SessionSnapshot)
async def report_auth_event(
    event_request: AuthEventRequest,
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_session_observer)
):
    """Auth state change that happened on the client (sign-in, sign-out, user update, token refresh)"""
    event = event_request.event
    if event != AuthEvent.SIGNED_OUT and session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if observer.state == SessionState.UNINITIALIZED:
        # A sign-in always starts from the anonymous state
        observer.load(None if event in (AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT) else session)
    observer.handle_auth_event(event, session)
    return observer.snapshot(drain=True)


@router.post("/subjects", response_model=ReplayResponse, status_code=201)
async def watch_subject(
    subject: SubjectRequest,
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_synced_observer)
):
    """Declare the subject of the client's current page and replay a matching intent right away"""
    observer.watch(subject.kind, subject.subject_id)
    result = observer.replay(subject.kind, subject.subject_id, session)
    return ReplayResponse(result=result, session=observer.snapshot(drain=True))


@router.delete("/subjects/{kind}/{subject_id}", status_code=204)
async def unwatch_subject(
    kind: ActionKind,
    subject_id: str,
    observer: SessionObserver = Depends(get_session_observer)
):
    observer.unwatch(kind, subject_id)
    return None
