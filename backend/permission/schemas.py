"""Pydantic request / response models for the permission endpoints."""

from datetime import datetime
from typing import List

from pydantic import Field

from core.schemas import APIModel


# -- Requests --------------------------------------------------------------


class GrantPermissionRequest(APIModel):
    user_id: int
    # Replaces the user's whole grant set; [] revokes everything
    category_ids: List[int] = Field(default_factory=list)


# -- Responses -------------------------------------------------------------


class CategoryPermissionInfo(APIModel):
    category_id: int
    category_name: str
    granted_at: datetime
    granted_by_username: str


class UserPermissionResponse(APIModel):
    user_id: int
    username: str
    email: str
    permissions: List[CategoryPermissionInfo] = Field(default_factory=list)
