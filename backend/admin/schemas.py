"""Pydantic request models for the admin user-management endpoints."""

from typing import Optional

from auth.schemas import UpdateProfileRequest


# -- Requests --------------------------------------------------------------


class UpdateUserRequest(UpdateProfileRequest):
    role: Optional[str] = None  # only admins may change roles
