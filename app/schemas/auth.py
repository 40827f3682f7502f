from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


# Request schemas
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=128)
    confirm_password: Optional[str] = None


# Response schemas
class SessionUserResponse(BaseModel):
    id: UUID
    email: str


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuthStateResponse(BaseModel):
    status: str
    loading: bool = False
    user: Optional[SessionUserResponse] = None
    profile: Optional[ProfileResponse] = None
    is_admin: bool = False
    redirect_to: Optional[str] = None


class AuthResponse(AuthStateResponse):
    access_token: str
    token_type: str = "bearer"
    message: Optional[str] = None


class LogoutResponse(BaseModel):
    message: str
    redirect_to: str
