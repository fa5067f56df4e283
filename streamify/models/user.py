# streamify/models/user.py
# User models for authentication, onboarding and password reset

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the web client sends them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request fields are optional so missing values produce a 400 with a
# readable message instead of a 422 validation error.
class SignupRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class OnboardingRequest(CamelModel):
    full_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    profile_pic: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class VerifyOtpRequest(CamelModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class UserResponse(CamelModel):
    id: str = Field(alias="_id")
    email: str
    full_name: str
    bio: str = ""
    profile_pic: str = ""
    location: str = ""
    is_onboarded: bool = False
    friends: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicUserResponse(CamelModel):
    """Profile fields visible to other users."""

    id: str = Field(alias="_id")
    full_name: str
    bio: str = ""
    profile_pic: str = ""
    location: str = ""


class AuthResponse(BaseModel):
    success: bool = True
    user: UserResponse
