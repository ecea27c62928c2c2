from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

from app.modules.gate.schemas import GateDecision
from app.modules.replay.schemas import ActionOutcome
from app.modules.session.schemas import SessionSnapshot


class FeatureStatus(str, Enum):
    PLANNED = "planned"
    IN_DEVELOPMENT = "in_development"
    READY_FOR_DEMO = "ready_for_demo"
    LAUNCHED = "launched"


class FeatureResponse(BaseModel):
    id: str
    title: str
    description: str
    status: Optional[FeatureStatus] = None
    created_at: Optional[datetime] = None
    votes: int = 0

    class Config:
        from_attributes = True


class VoteResponse(BaseModel):
    id: str
    feature_id: str
    user_id: str
    upvoted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VoteCountResponse(BaseModel):
    feature_id: str
    votes: int
    has_voted: Optional[bool] = None


class VoteRequest(BaseModel):
    return_path: Optional[str] = None


class VoteActionResponse(BaseModel):
    decision: GateDecision
    outcome: Optional[ActionOutcome] = None
    votes: Optional[int] = None
    session: Optional[SessionSnapshot] = None


class RetractVoteResponse(BaseModel):
    feature_id: str
    removed: bool
    votes: int
