from fastapi import APIRouter, BackgroundTasks, Depends
from app.modules.engagement.service import EngagementRecorder
from app.modules.gate.service import GateEvaluator
from app.modules.intents.schemas import ActionKind, GatedAction
from app.modules.replay.handlers import ActionHandlers
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import Session
from app.modules.votes.schemas import (
    FeatureResponse, VoteActionResponse, VoteCountResponse, VoteRequest, RetractVoteResponse
)
from app.modules.votes.service import VoteService
from app.core.dependencies import (
    get_current_session, get_engagement_recorder, get_gate_evaluator, get_optional_session,
    get_synced_observer, get_vote_service
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/features", tags=["features"])


@router.get("", response_model=List[FeatureResponse])
async def list_features(service: VoteService = Depends(get_vote_service)):
    """Roadmap features with their vote counts"""
    return service.list_features()


@router.get("/{feature_id}", response_model=FeatureResponse)
async def get_feature(feature_id: str, service: VoteService = Depends(get_vote_service)):
    return service.get_feature(feature_id)


@router.get("/{feature_id}/votes", response_model=VoteCountResponse)
async def get_vote_count(
    feature_id: str,
    session: Optional[Session] = Depends(get_optional_session),
    service: VoteService = Depends(get_vote_service)
):
    has_voted = service.has_voted(feature_id, session.user_id) if session else None
    return VoteCountResponse(feature_id=feature_id, votes=service.count_votes(feature_id), has_voted=has_voted)


@router.post("/{feature_id}/votes", response_model=VoteActionResponse)
async def upvote_feature(
    feature_id: str,
    background_tasks: BackgroundTasks,
    vote_request: Optional[VoteRequest] = None,
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_synced_observer),
    gate: GateEvaluator = Depends(get_gate_evaluator),
    service: VoteService = Depends(get_vote_service),
    recorder: EngagementRecorder = Depends(get_engagement_recorder)
):
    """
    Gated upvote. Anonymous callers get a redirect_to_auth decision and the vote
    is kept as a pending intent; a second vote by the same user returns 409.
    """
    return_path = (vote_request.return_path if vote_request and vote_request.return_path
                   else f"/features/{feature_id}")
    action = GatedAction(kind=ActionKind.VOTE, target_id=feature_id, return_path=return_path)
    decision = gate.evaluate(action, session, observer.profile_complete if session else False, observer.role)
    if not decision.allowed:
        return VoteActionResponse(decision=decision)

    outcome = ActionHandlers(service).perform(action, session, observer.effects)
    background_tasks.add_task(
        recorder.track,
        "feature_upvote",
        {"feature_id": feature_id},
        None,
        observer.session or session,
        observer.profile_complete,
    )
    return VoteActionResponse(
        decision=decision,
        outcome=outcome,
        votes=service.count_votes(feature_id),
        session=observer.snapshot(drain=True),
    )


@router.delete("/{feature_id}/votes", response_model=RetractVoteResponse)
async def retract_vote(
    feature_id: str,
    session: Session = Depends(get_current_session),
    service: VoteService = Depends(get_vote_service)
):
    removed = service.retract_vote(feature_id, session.user_id)
    return RetractVoteResponse(feature_id=feature_id, removed=removed, votes=service.count_votes(feature_id))
