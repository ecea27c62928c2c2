from supabase import Client
from app.modules.profiles.models import PROFILES_TABLE, UserRole
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileCompletenessResponse
from app.config.roles_config import get_required_fields, get_registration_route
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _is_present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def missing_profile_fields(profile: Optional[ProfileResponse], role: Optional[UserRole] = None) -> List[str]:
    """Required fields (for the profile's role) that are absent or blank."""
    if role is None and profile is not None:
        role = profile.role
    required = get_required_fields(role)
    if profile is None:
        return list(required)
    return [field for field in required if not _is_present(getattr(profile, field, None))]


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile by user ID, None when the user has no profile row"""
        result = self.supabase.table(PROFILES_TABLE)\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return ProfileResponse(**result.data)

    def get_role(self, user_id: str) -> Optional[UserRole]:
        """Role from the profile row. Errors propagate; callers decide how to degrade."""
        result = self.supabase.table(PROFILES_TABLE)\
            .select("role")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data or not result.data.get("role"):
            return None
        try:
            return UserRole(result.data["role"])
        except ValueError:
            logger.warning(f"Unknown role {result.data['role']!r} for user {user_id}")
            return None

    def completeness(self, user_id: str, role: Optional[UserRole] = None) -> ProfileCompletenessResponse:
        profile = self.get_profile(user_id)
        if role is None and profile is not None:
            role = profile.role
        missing = missing_profile_fields(profile, role)
        return ProfileCompletenessResponse(
            user_id=user_id,
            role=role,
            complete=profile is not None and not missing,
            missing_fields=missing,
            registration_route=get_registration_route(role),
        )

    def is_profile_complete(self, user_id: str, role: Optional[UserRole] = None) -> bool:
        return self.completeness(user_id, role).complete

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile fields that were provided"""
        try:
            update_data = profile_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table(PROFILES_TABLE)\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Profile update error: {str(e)}")

    def ensure_profile(self, user_id: str, role: UserRole = UserRole.FAMILY) -> ProfileResponse:
        """Return the user's profile, creating a bare one with the given role if missing"""
        try:
            existing = self.get_profile(user_id)
            if existing:
                return existing

            logger.info(f"Creating new profile for user {user_id}")
            result = self.supabase.table(PROFILES_TABLE).insert({
                "id": user_id,
                "role": role.value,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error ensuring profile for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Profile creation error: {str(e)}")
