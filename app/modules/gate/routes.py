from fastapi import APIRouter, Depends
from app.modules.gate.schemas import GateDecision
from app.modules.gate.service import GateEvaluator
from app.modules.intents.schemas import GatedAction
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import Session
from app.core.dependencies import get_gate_evaluator, get_optional_session, get_synced_observer
from typing import Optional

router = APIRouter(prefix="/gate", tags=["gate"])


@router.post("/evaluate", response_model=GateDecision)
async def evaluate_action(
    action: GatedAction,
    session: Optional[Session] = Depends(get_optional_session),
    observer: SessionObserver = Depends(get_synced_observer),
    gate: GateEvaluator = Depends(get_gate_evaluator)
):
    """Decide allow / redirect to auth / redirect to profile completion for an action"""
    return gate.evaluate(action, session, observer.profile_complete if session else False, observer.role)
