from fastapi import APIRouter, Depends, HTTPException
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.modules.auth.service import AuthService
from app.modules.profiles.models import UserRole
from app.modules.profiles.service import ProfileService
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import AuthEvent, Session, SessionState
from app.core.dependencies import (
    get_auth_service, get_bearer_token, get_current_session, get_profile_service, get_session_observer
)
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service),
    observer: SessionObserver = Depends(get_session_observer)
):
    """Login, then run the client's post-sign-in flow (pending replays or role redirect)"""
    session = service.login(login_data)
    try:
        profile_service.ensure_profile(session.user_id, session.role or UserRole.FAMILY)
    except HTTPException as e:
        logger.warning(f"Could not ensure profile for user {session.user_id}: {e.detail}")

    if observer.state == SessionState.UNINITIALIZED:
        observer.load(None)
    observer.handle_auth_event(AuthEvent.SIGNED_IN, session)
    return TokenResponse(
        access_token=session.access_token,
        token_type="bearer",
        user_id=session.user_id,
        email=session.email or login_data.email,
        session=observer.snapshot(drain=True),
    )


@router.post("/logout", status_code=200)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    observer: SessionObserver = Depends(get_session_observer)
):
    """Logout; pending intents of this client are kept"""
    if not observer.sign_out(token):
        raise HTTPException(status_code=500, detail="Failed to sign out")
    return {"message": "Logged out successfully", "session": observer.snapshot(drain=True)}


@router.get("/me")
async def get_current_user(
    session: Session = Depends(get_current_session),
    profile_service: ProfileService = Depends(get_profile_service)
) -> Dict:
    """Current user with the role and completeness taken from the profile"""
    try:
        completeness = profile_service.completeness(session.user_id)
        role, profile_complete = completeness.role, completeness.complete
    except Exception as e:
        logger.error(f"Error loading profile for user {session.user_id}: {e}")
        role, profile_complete = None, False
    return {
        "id": session.user_id,
        "email": session.email,
        "role": role,
        "profile_complete": profile_complete,
    }
