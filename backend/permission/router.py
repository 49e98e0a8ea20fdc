"""
Permission endpoints – grant, revoke and inspect category grants.

All routes live under ``/category`` and require the ``admin`` role claim.
This router must be included *before* the category router, otherwise
``GET /category/user-permissions`` would be captured by
``GET /category/{category_id}``.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from core.schemas import MessageResponse
from core.security import Identity, get_current_identity
from permission import service
from permission.schemas import GrantPermissionRequest, UserPermissionResponse

router = APIRouter(prefix="/category", tags=["permission"])


# ---------------------------------------------------------------------------
# POST /category/grant-permission  – replace a user's grant set
# ---------------------------------------------------------------------------


@router.post("/grant-permission", response_model=MessageResponse)
def grant_permission(
    body: GrantPermissionRequest,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    The user ends up with exactly ``categoryIds``; grants not in the list
    are removed.  An empty list revokes everything.
    """
    target = service.grant_permissions(db, caller, body.user_id, body.category_ids)
    return MessageResponse(message=f"Permissions granted successfully to {target.username}")


# ---------------------------------------------------------------------------
# DELETE /category/revoke-permission/{userId}/{categoryId}
# ---------------------------------------------------------------------------


@router.delete("/revoke-permission/{user_id}/{category_id}", response_model=MessageResponse)
def revoke_permission(
    user_id: int,
    category_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    service.revoke_permission(db, caller, user_id, category_id)
    return MessageResponse(message="Permission revoked successfully")


# ---------------------------------------------------------------------------
# GET /category/user-permissions[/{userId}]
# ---------------------------------------------------------------------------


@router.get("/user-permissions", response_model=List[UserPermissionResponse])
def all_user_permissions(
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Grant sets of every non-admin user."""
    return service.list_all_permissions(db, caller)


@router.get("/user-permissions/{user_id}", response_model=UserPermissionResponse)
def user_permissions(
    user_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return service.list_user_permissions(db, caller, user_id)
