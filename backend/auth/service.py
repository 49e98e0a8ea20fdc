"""
Identity operations – registration, login, self-service profile, login trail.

Every function takes the request's ``Session`` as its first argument and
runs its writes inside one ``transaction``.  Domain rule violations raise
``core.errors`` kinds before anything is written.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import DuplicateEmail, DuplicateUsername, InvalidCredentials, NotFound
from core.logger import logger
from core.policy import USER_ROLE
from core.security import Identity, create_access_token, hash_password, verify_password
from database import transaction
from models.login_event import LoginEvent
from models.user import User


@dataclass
class LoginResult:
    token: str
    expires_at: datetime
    role: str


# ---------------------------------------------------------------------------
# Uniqueness helpers (exact match, unlike category names)
# ---------------------------------------------------------------------------


def _username_taken(db: Session, username: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(User.id).filter(User.username == username)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _raise_duplicate(
    db: Session,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    """
    Map a unique-index violation back to the domain error.  Called after
    rollback, when a concurrent writer won the check-then-insert race.
    """
    if username and _username_taken(db, username, exclude_id):
        raise DuplicateUsername()
    if email and _email_taken(db, email, exclude_id):
        raise DuplicateEmail()


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


def register(
    db: Session,
    username: str,
    email: str,
    password: str,
    full_name: Optional[str] = None,
    role: Optional[str] = None,
) -> User:
    """Create a user.  The password is stored only as a PBKDF2 digest."""
    if _username_taken(db, username):
        raise DuplicateUsername()
    if _email_taken(db, email):
        raise DuplicateEmail()

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        role=role or USER_ROLE,
        created_at=datetime.now(timezone.utc),
    )
    try:
        with transaction(db):
            db.add(user)
    except IntegrityError:
        _raise_duplicate(db, username, email)
        raise

    db.refresh(user)
    logger.info("Registered user id=%d username=%s role=%s", user.id, user.username, user.role)
    return user


def authenticate(
    db: Session,
    identifier: str,
    password: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> LoginResult:
    """
    Verify credentials against the user whose username *or* email equals
    *identifier*, record a LoginEvent, and mint an access token.

    Unknown identifier and wrong password raise the same
    ``InvalidCredentials`` so the response never reveals which one it was.
    """
    user = (
        db.query(User)
        .filter(or_(User.username == identifier, User.email == identifier))
        .first()
    )
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Rejected login for identifier=%s ip=%s", identifier, ip_address)
        raise InvalidCredentials()

    token, expires_at = create_access_token(user)

    with transaction(db):
        db.add(LoginEvent(
            user_id=user.id,
            login_time=datetime.now(timezone.utc),
            ip_address=ip_address,
            user_agent=user_agent,
        ))

    logger.info("User id=%d logged in from %s", user.id, ip_address or "unknown")
    return LoginResult(token=token, expires_at=expires_at, role=user.role)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


def get_profile(db: Session, caller: Identity) -> User:
    return get_user_or_404(db, caller.user_id)


def _apply_user_fields(
    db: Session,
    user: User,
    username: Optional[str],
    email: Optional[str],
    full_name: Optional[str],
    password: Optional[str],
    role: Optional[str],
) -> None:
    if username and username != user.username:
        if _username_taken(db, username, exclude_id=user.id):
            raise DuplicateUsername()
        user.username = username

    if email and email != user.email:
        if _email_taken(db, email, exclude_id=user.id):
            raise DuplicateEmail()
        user.email = email

    if full_name:
        user.full_name = full_name
    if role:
        user.role = role
    if password:
        user.password_hash = hash_password(password)


def update_user_fields(
    db: Session,
    user: User,
    username: Optional[str] = None,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[str] = None,
) -> None:
    """
    Shared partial-update rules for self and admin updates.  Empty or
    ``None`` values leave the field alone; username / email must stay
    unique among *other* users.  Nothing is kept if any check fails.
    """
    user_id = user.id
    try:
        with transaction(db):
            _apply_user_fields(db, user, username, email, full_name, password, role)
    except IntegrityError:
        _raise_duplicate(db, username, email, exclude_id=user_id)
        raise


def update_profile(
    db: Session,
    caller: Identity,
    username: Optional[str] = None,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Self-service update.  The role cannot be changed through this path."""
    user = get_user_or_404(db, caller.user_id)
    update_user_fields(db, user, username=username, email=email, full_name=full_name, password=password)
    logger.info("User id=%d updated own profile", user.id)
    return user


# ---------------------------------------------------------------------------
# Login trail
# ---------------------------------------------------------------------------


def list_logins(db: Session, caller: Identity) -> List[LoginEvent]:
    """The caller's own login events, newest first."""
    return (
        db.query(LoginEvent)
        .filter(LoginEvent.user_id == caller.user_id)
        .order_by(LoginEvent.login_time.desc(), LoginEvent.id.desc())
        .all()
    )
