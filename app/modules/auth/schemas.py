from pydantic import BaseModel, EmailStr
from typing import Optional

from app.modules.profiles.models import UserRole
from app.modules.session.schemas import SessionSnapshot


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    session: Optional[SessionSnapshot] = None


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.FAMILY


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    role: UserRole
    message: str
