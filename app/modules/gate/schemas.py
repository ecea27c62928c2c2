from pydantic import BaseModel
from typing import Optional, Dict, Any
from enum import Enum

from app.modules.intents.schemas import GatedAction


class Disposition(str, Enum):
    ALLOW = "allow"
    REDIRECT_TO_AUTH = "redirect_to_auth"
    REDIRECT_TO_PROFILE_COMPLETION = "redirect_to_profile_completion"


class GateDecision(BaseModel):
    disposition: Disposition
    action: GatedAction
    redirect_to: Optional[str] = None
    state: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    intent_persisted: bool = False

    @property
    def allowed(self) -> bool:
        return self.disposition == Disposition.ALLOW
