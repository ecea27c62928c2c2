"""
Role Routing and Profile Requirements Configuration
This config defines, per user role, where the client is sent after sign-in,
where it completes registration, and which profile fields make a profile complete.
Used by the session observer, the gate evaluator and the profile service.
"""
from typing import Dict, Optional, Tuple

from app.modules.profiles.models import UserRole

# Landing page per role after a genuine sign-in
DASHBOARD_ROUTES: Dict[UserRole, str] = {
    UserRole.FAMILY: "/dashboard/family",
    UserRole.PROFESSIONAL: "/dashboard/professional",
    UserRole.COMMUNITY: "/dashboard/community",
    UserRole.ADMIN: "/dashboard/admin",
}

# Registration page per role; admins never need registration
REGISTRATION_ROUTES: Dict[UserRole, str] = {
    UserRole.FAMILY: "/registration/family",
    UserRole.PROFESSIONAL: "/registration/professional",
    UserRole.COMMUNITY: "/registration/community",
    UserRole.ADMIN: "/dashboard/admin",
}

DEFAULT_REGISTRATION_ROUTE = "/registration"

# Profile fields that must be present for the profile to count as complete
REQUIRED_PROFILE_FIELDS: Dict[UserRole, Tuple[str, ...]] = {
    UserRole.FAMILY: ("full_name",),
    UserRole.PROFESSIONAL: ("full_name", "professional_type", "care_services"),
    UserRole.COMMUNITY: ("full_name",),
    UserRole.ADMIN: (),
}

DEFAULT_REQUIRED_PROFILE_FIELDS: Tuple[str, ...] = ("full_name",)


def get_dashboard_route(role: Optional[UserRole]) -> Optional[str]:
    """Role-specific landing page, or None when the role is unknown."""
    if role is None:
        return None
    return DASHBOARD_ROUTES.get(role)


def get_registration_route(role: Optional[UserRole]) -> str:
    if role is None:
        return DEFAULT_REGISTRATION_ROUTE
    return REGISTRATION_ROUTES.get(role, DEFAULT_REGISTRATION_ROUTE)


def get_required_fields(role: Optional[UserRole]) -> Tuple[str, ...]:
    if role is None:
        return DEFAULT_REQUIRED_PROFILE_FIELDS
    return REQUIRED_PROFILE_FIELDS.get(role, DEFAULT_REQUIRED_PROFILE_FIELDS)
