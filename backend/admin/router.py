"""
Admin endpoints – user lifecycle management.

Mounted under ``/auth`` next to the self-service routes.  Every handler
delegates to ``admin.service``, which rejects callers whose token does not
carry the ``admin`` role with 403 before any business logic runs.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from core.schemas import MessageResponse
from core.security import Identity, get_current_identity
from admin import service
from admin.schemas import UpdateUserRequest
from auth.schemas import UserInfoResponse

router = APIRouter(prefix="/auth", tags=["admin"])


# ---------------------------------------------------------------------------
# GET /auth/users  – list all users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=List[UserInfoResponse])
def list_users(
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Return every user row (no password data – handled by the schema)."""
    return service.list_users(db, caller)


# ---------------------------------------------------------------------------
# GET /auth/user/{id}
# ---------------------------------------------------------------------------


@router.get("/user/{user_id}", response_model=UserInfoResponse)
def get_user(
    user_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return service.get_user(db, caller, user_id)


# ---------------------------------------------------------------------------
# PUT /auth/user/{id}  – update any field, including role
# ---------------------------------------------------------------------------


@router.put("/user/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Partial update of another user.  A role change only reaches that user's
    requests after they log in again – existing tokens keep the old role.
    """
    service.admin_update_user(
        db,
        caller,
        user_id,
        username=body.username,
        email=body.email,
        full_name=body.full_name,
        password=body.password,
        role=body.role,
    )
    return MessageResponse(message="User updated successfully")


# ---------------------------------------------------------------------------
# DELETE /auth/user/{id}
# ---------------------------------------------------------------------------


@router.delete("/user/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Delete a user and their login history.  Guard: not yourself."""
    service.admin_delete_user(db, caller, user_id)
    return MessageResponse(message="User deleted successfully")
