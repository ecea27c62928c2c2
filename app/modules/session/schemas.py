from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from app.modules.profiles.models import UserRole
from app.modules.intents.schemas import ActionKind


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthEvent(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    USER_UPDATED = "user_updated"
    TOKEN_REFRESHED = "token_refreshed"


class Session(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[UserRole] = None
    access_token: Optional[str] = None
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class NavigationEffect(BaseModel):
    path: str
    state: Optional[Dict[str, Any]] = None
    replace: bool = False


class Notification(BaseModel):
    level: str = "info"  # success | info | error
    message: str


class SessionSnapshot(BaseModel):
    client_id: str
    state: SessionState
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    profile_complete: bool = False
    navigation: Optional[NavigationEffect] = None
    notifications: List[Notification] = Field(default_factory=list)


class AuthEventRequest(BaseModel):
    event: AuthEvent


class SubjectRequest(BaseModel):
    kind: ActionKind
    subject_id: str
