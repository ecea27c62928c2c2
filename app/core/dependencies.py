"""
Core dependencies for client context resolution, optional authentication and gate wiring
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.engagement.service import ActionThrottle, EngagementRecorder
from app.modules.gate.service import GateEvaluator
from app.modules.intents.service import IntentStore
from app.modules.intents.storage import ClientStorage, SupabaseStorage, get_memory_storage
from app.modules.profiles.service import ProfileService
from app.modules.replay.handlers import ActionHandlers
from app.modules.replay.service import ReplayDispatcher
from app.modules.session import registry
from app.modules.session.effects import EffectOutbox
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import AuthEvent, Session, SessionState
from app.modules.votes.service import VoteService
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_action_throttle = ActionThrottle(cooldown_seconds=settings.engagement_cooldown_seconds)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


def get_vote_service(supabase: Client = Depends(get_supabase)) -> VoteService:
    return VoteService(supabase)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_optional_session(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Session]:
    """Session for the bearer token, or None for anonymous callers and expired tokens"""
    if not token:
        return None
    try:
        return auth_service.get_session(token)
    except HTTPException as e:
        logger.debug(f"Treating request as anonymous: {e.detail}")
        return None


def get_current_session(session: Optional[Session] = Depends(get_optional_session)) -> Session:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def get_client_id(request: Request) -> str:
    """Browser context identifier sent by the client on every request"""
    client_id = request.headers.get(settings.client_id_header)
    if not client_id or not client_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {settings.client_id_header} header"
        )
    return client_id.strip()


def get_client_storage() -> ClientStorage:
    if settings.intent_storage_backend == "supabase":
        return SupabaseStorage(get_service_supabase())
    return get_memory_storage()


def get_intent_store(
    client_id: str = Depends(get_client_id),
    storage: ClientStorage = Depends(get_client_storage)
) -> IntentStore:
    return IntentStore(storage, client_id, ttl_hours=settings.intent_ttl_hours)


def get_gate_evaluator(intent_store: IntentStore = Depends(get_intent_store)) -> GateEvaluator:
    return GateEvaluator(intent_store, auth_route=settings.auth_route)


def build_session_observer(
    client_id: str,
    supabase: Client,
    storage: ClientStorage,
    auth_service: Optional[AuthService] = None,
) -> SessionObserver:
    intent_store = IntentStore(storage, client_id, ttl_hours=settings.intent_ttl_hours)
    effects = EffectOutbox()
    handlers = ActionHandlers(VoteService(supabase))
    dispatcher = ReplayDispatcher(intent_store, handlers, effects)
    return SessionObserver(
        client_id=client_id,
        profile_service=ProfileService(supabase),
        intent_store=intent_store,
        dispatcher=dispatcher,
        effects=effects,
        sign_out_fn=auth_service.logout if auth_service else None,
    )


def get_session_observer(
    client_id: str = Depends(get_client_id),
    supabase: Client = Depends(get_supabase),
    storage: ClientStorage = Depends(get_client_storage),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionObserver:
    return registry.get_or_create(
        client_id,
        lambda: build_session_observer(client_id, supabase, storage, auth_service),
    )


def get_synced_observer(
    observer: SessionObserver = Depends(get_session_observer),
    session: Optional[Session] = Depends(get_optional_session),
) -> SessionObserver:
    """Observer for this client, loaded on first use with the caller's current session"""
    if observer.state == SessionState.UNINITIALIZED:
        observer.load(session)
    elif session is None:
        if observer.state == SessionState.AUTHENTICATED:
            # No valid token on this request: the client id alone never authenticates
            observer.expire()
    elif observer.session is None or observer.session.user_id != session.user_id:
        # Signed in on the client without telling us
        observer.handle_auth_event(AuthEvent.SIGNED_IN, session)
    return observer


def get_engagement_recorder(
    client_id: str = Depends(get_client_id),
    supabase: Client = Depends(get_supabase),
    storage: ClientStorage = Depends(get_client_storage),
) -> EngagementRecorder:
    return EngagementRecorder(supabase, storage, client_id, enabled=settings.tracking_enabled)


def get_action_throttle() -> ActionThrottle:
    return _action_throttle
