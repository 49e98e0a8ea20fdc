"""Pydantic request / response models for the category endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from core.schemas import APIModel


# -- Requests --------------------------------------------------------------


class CreateCategoryRequest(APIModel):
    name: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1)
    link: Optional[str] = None


class UpdateCategoryRequest(APIModel):
    # Empty name/content are ignored.  ``link`` is replaced whenever the key
    # is present, so an explicit null clears it.
    name: Optional[str] = Field(default=None, max_length=100)
    content: Optional[str] = None
    link: Optional[str] = None


# -- Responses -------------------------------------------------------------


class CategoryResponse(APIModel):
    id: int
    name: str
    content: str
    link: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by_username: str
    created_by_user_id: int


class CategoryCreatedResponse(APIModel):
    message: str
    category_id: int
