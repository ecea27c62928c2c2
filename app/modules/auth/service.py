import hashlib
import time
from datetime import datetime, timezone
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse
from app.modules.profiles.models import UserRole
from app.modules.session.schemas import Session
from fastapi import HTTPException
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def _metadata_role(metadata: Dict[str, Any]) -> Optional[UserRole]:
    try:
        return UserRole(metadata.get("role")) if metadata.get("role") else None
    except ValueError:
        return None


def _from_epoch(value) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {"role": register_data.role.value}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                role=register_data.role,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> Session:
        """Authenticate user using Supabase Auth and return the new session"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            user = auth_response.user
            auth_session = auth_response.session
            expires_at = _from_epoch(getattr(auth_session, "expires_at", None))
            return Session(
                user_id=user.id,
                email=user.email or login_data.email,
                role=_metadata_role(user.user_metadata or {}),
                access_token=auth_session.access_token,
                issued_at=datetime.now(timezone.utc),
                expires_at=expires_at,
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def get_session(self, token: str) -> Session:
        user_data = self.get_current_user(token)
        return Session(
            user_id=user_data["id"],
            email=user_data.get("email"),
            role=_metadata_role(user_data.get("user_metadata") or {}),
            access_token=token,
        )

    def logout(self, token: Optional[str] = None) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase Auth tokens are stateless JWTs; the token expires on its own
            self.supabase.auth.sign_out()
            if token:
                _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            return True
        except Exception as e:
            logger.error(f"Sign out error: {e}")
            return False


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()
