"""
Auth endpoints – registration, login, profile, login history.

Security notes
--------------
* Login returns the *same* error message whether the identifier doesn't
  exist or the password is wrong.  This prevents user-enumeration attacks.
* Profile endpoints act on the id carried by the bearer token; the role in
  the token is never consulted or changed here.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from core.schemas import MessageResponse
from core.security import Identity, get_client_ip, get_current_identity
from auth import service
from auth.schemas import (
    LoginEventRow,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UpdateProfileRequest,
    UserInfoResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account.  ``role`` defaults to ``user`` when empty."""
    user = service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        role=body.role,
    )
    return RegisterResponse(message="Registration successful", username=user.username, role=user.role)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate by username or email and return a signed JWT."""
    result = service.authenticate(
        db,
        identifier=body.username_or_email,
        password=body.password,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return LoginResponse(token=result.token, expires_at=result.expires_at, role=result.role)


# ---------------------------------------------------------------------------
# GET / PUT /auth/profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=UserInfoResponse)
def profile(
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Return the authenticated user's public profile (no secrets)."""
    return service.get_profile(db, caller)


@router.put("/profile", response_model=MessageResponse)
def update_profile(
    body: UpdateProfileRequest,
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Partial self-update.  Empty fields are ignored; role is not accepted."""
    service.update_profile(
        db,
        caller,
        username=body.username,
        email=body.email,
        full_name=body.full_name,
        password=body.password,
    )
    return MessageResponse(message="Profile updated successfully")


# ---------------------------------------------------------------------------
# GET /auth/logins
# ---------------------------------------------------------------------------


@router.get("/logins", response_model=List[LoginEventRow])
def logins(
    caller: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """The caller's login history, newest first."""
    return service.list_logins(db, caller)
