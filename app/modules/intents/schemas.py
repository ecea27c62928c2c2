from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum


class ActionKind(str, Enum):
    VOTE = "vote"
    STORY = "story"
    BOOKING = "booking"
    MESSAGE = "message"
    PROFILE_UPDATE = "profile_update"
    SUBSCRIPTION = "subscription"
    REGISTRATION = "registration"

    @property
    def requires_complete_profile(self) -> bool:
        return self in _PROFILE_GATED_KINDS

    @property
    def sign_in_prompt(self) -> str:
        return _SIGN_IN_PROMPTS[self]


_PROFILE_GATED_KINDS = frozenset({
    ActionKind.STORY,
    ActionKind.BOOKING,
    ActionKind.MESSAGE,
    ActionKind.SUBSCRIPTION,
    ActionKind.REGISTRATION,
})

_SIGN_IN_PROMPTS = {
    ActionKind.VOTE: "vote for this feature",
    ActionKind.STORY: "share a story",
    ActionKind.BOOKING: "book care",
    ActionKind.MESSAGE: "send a message",
    ActionKind.PROFILE_UPDATE: "update your profile",
    ActionKind.SUBSCRIPTION: "subscribe",
    ActionKind.REGISTRATION: "complete your registration",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GatedAction(BaseModel):
    kind: ActionKind
    target_id: str
    return_path: str = "/"


class PendingIntent(BaseModel):
    kind: ActionKind
    target_id: str
    return_path: str = "/"
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_action(cls, action: GatedAction) -> "PendingIntent":
        return cls(kind=action.kind, target_id=action.target_id, return_path=action.return_path)

    def to_action(self) -> GatedAction:
        return GatedAction(kind=self.kind, target_id=self.target_id, return_path=self.return_path)


class PendingIntentWrite(BaseModel):
    target_id: str
    return_path: str = "/"


class PendingIntentListResponse(BaseModel):
    client_id: str
    intents: List[PendingIntent]


class ClearIntentResponse(BaseModel):
    kind: ActionKind
    cleared: bool
    remaining: Optional[PendingIntent] = None
