"""
Category endpoints – CRUD over categories.

Security invariants enforced by every handler
---------------------------------------------
* JWT is required on every endpoint (via ``get_current_identity``).
* Reads by non-admin callers are limited to categories they hold a grant
  for; a direct GET on any other id is rejected with 403.
* Create / update / delete require the ``admin`` role claim.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from core.schemas import MessageResponse
from core.security import Identity, get_current_identity
from category import service
from category.schemas import (
    CategoryCreatedResponse,
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)

router = APIRouter(prefix="/category", tags=["category"])


# ---------------------------------------------------------------------------
# GET /category  – categories visible to the caller
# ---------------------------------------------------------------------------


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return service.list_categories(db, caller)


# ---------------------------------------------------------------------------
# GET /category/{id}
# ---------------------------------------------------------------------------


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return service.get_category(db, caller, category_id)


# ---------------------------------------------------------------------------
# POST /category  – create (admin)
# ---------------------------------------------------------------------------


@router.post("", response_model=CategoryCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CreateCategoryRequest,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    category_id = service.create_category(db, caller, body.name, body.content, body.link)
    return CategoryCreatedResponse(message="Category created successfully", category_id=category_id)


# ---------------------------------------------------------------------------
# PUT /category/{id}  – partial update (admin)
# ---------------------------------------------------------------------------


@router.put("/{category_id}", response_model=MessageResponse)
def update_category(
    category_id: int,
    body: UpdateCategoryRequest,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Only fields with a value are changed, except ``link``: sending
    ``"link": null`` clears it, omitting the key keeps it.
    """
    link = body.link if "link" in body.model_fields_set else service.UNSET
    service.update_category(
        db,
        caller,
        category_id,
        name=body.name,
        content=body.content,
        link=link,
    )
    return MessageResponse(message="Category updated successfully")


# ---------------------------------------------------------------------------
# DELETE /category/{id}  – delete with its grants (admin)
# ---------------------------------------------------------------------------


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    service.delete_category(db, caller, category_id)
    return MessageResponse(message="Category deleted successfully")
