"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from core.schemas import APIModel


# -- Requests --------------------------------------------------------------


class RegisterRequest(APIModel):
    username: str
    email: str
    password: str
    full_name: Optional[str] = None
    role: Optional[str] = "user"  # empty → "user"


class LoginRequest(APIModel):
    username_or_email: str
    password: str


class UpdateProfileRequest(APIModel):
    # Absent or empty fields are left unchanged
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None


# -- Responses -------------------------------------------------------------


class RegisterResponse(APIModel):
    message: str
    username: str
    role: str


class LoginResponse(APIModel):
    token: str
    expires_at: datetime
    role: str


class UserInfoResponse(APIModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    role: str
    created_at: datetime


class LoginEventRow(APIModel):
    id: int
    login_time: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
