from fastapi import APIRouter, Depends, HTTPException
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileCompletenessResponse
from app.modules.profiles.service import ProfileService
from app.modules.session.observer import SessionObserver
from app.modules.session.schemas import Session
from app.core.dependencies import get_current_session, get_profile_service, get_synced_observer
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    session: Session = Depends(get_current_session),
    service: ProfileService = Depends(get_profile_service)
):
    profile = service.get_profile(session.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/me")
async def update_my_profile(
    profile_data: ProfileUpdate,
    session: Session = Depends(get_current_session),
    service: ProfileService = Depends(get_profile_service),
    observer: SessionObserver = Depends(get_synced_observer)
) -> Dict:
    """Update the profile; completing it replays actions waiting on this client's page"""
    profile = service.update_profile(session.user_id, profile_data)
    observer.refresh_profile()
    return {
        "profile": profile.model_dump(mode="json"),
        "session": observer.snapshot(drain=True).model_dump(mode="json"),
    }


@router.get("/me/completeness", response_model=ProfileCompletenessResponse)
async def get_my_profile_completeness(
    session: Session = Depends(get_current_session),
    service: ProfileService = Depends(get_profile_service)
):
    return service.completeness(session.user_id)
