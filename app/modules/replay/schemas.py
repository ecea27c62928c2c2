from pydantic import BaseModel
from typing import Optional
from enum import Enum

from app.modules.intents.schemas import ActionKind, PendingIntent
from app.modules.session.schemas import SessionSnapshot


class OutcomeStatus(str, Enum):
    DONE = "done"
    DUPLICATE = "duplicate"
    NAVIGATED = "navigated"


class ActionOutcome(BaseModel):
    status: OutcomeStatus
    message: Optional[str] = None
    navigate_to: Optional[str] = None


class ReplayStatus(str, Enum):
    NONE = "none"          # nothing pending for this kind
    SKIPPED = "skipped"    # another subject, or the gate is still closed
    REPLAYED = "replayed"
    FAILED = "failed"


class ReplayResult(BaseModel):
    kind: ActionKind
    subject_id: str
    status: ReplayStatus
    intent: Optional[PendingIntent] = None
    outcome: Optional[ActionOutcome] = None
    error: Optional[str] = None


class ReplayRequest(BaseModel):
    kind: ActionKind
    subject_id: str


class ReplayResponse(BaseModel):
    result: ReplayResult
    session: SessionSnapshot
