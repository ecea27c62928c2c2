from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from app.modules.profiles.models import UserRole


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    professional_type: Optional[str] = None
    care_services: Optional[List[str]] = None
    care_recipient_name: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    role: Optional[UserRole] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    professional_type: Optional[str] = None
    care_services: Optional[List[str]] = None
    care_recipient_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileCompletenessResponse(BaseModel):
    user_id: str
    role: Optional[UserRole] = None
    complete: bool
    missing_fields: List[str] = []
    registration_route: str
