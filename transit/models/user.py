# backend/transit/models/user.py
# Request/response models for authentication

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, Optional


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)
    newPassword: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class SyncUserRequest(BaseModel):
    id: str = Field(..., min_length=1)
    email: EmailStr
    provider: Optional[str] = None
    provider_id: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    email: str


class LoginResponse(BaseModel):
    accessToken: str
    refreshToken: str
    user: UserSummary


class VerifyOTPResponse(BaseModel):
    message: str
    isVerified: bool


class SyncUserResponse(BaseModel):
    message: str
    created: bool
    user: Dict[str, Any]
