"""
Admin-only user management.

Every function first asserts that the caller's *token* carries the admin
role; the stored role of the caller is never consulted.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from auth.service import get_user_or_404, update_user_fields
from core.errors import SelfDeleteDenied
from core.logger import logger
from core.policy import require_admin
from core.security import Identity
from database import transaction
from models.login_event import LoginEvent
from models.user import User


def list_users(db: Session, caller: Identity) -> List[User]:
    require_admin(caller, "Only administrators can view all users")
    return db.query(User).order_by(User.id).all()


def get_user(db: Session, caller: Identity, user_id: int) -> User:
    require_admin(caller, "Only administrators can view other users")
    return get_user_or_404(db, user_id)


def admin_update_user(
    db: Session,
    caller: Identity,
    user_id: int,
    username: Optional[str] = None,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[str] = None,
) -> User:
    """Same field rules as a profile update, but the role is writable."""
    require_admin(caller, "Only administrators can update other users")
    user = get_user_or_404(db, user_id)
    update_user_fields(
        db,
        user,
        username=username,
        email=email,
        full_name=full_name,
        password=password,
        role=role,
    )
    logger.info("Admin id=%d updated user id=%d", caller.user_id, user_id)
    return user


def admin_delete_user(db: Session, caller: Identity, user_id: int) -> None:
    """
    Delete a user and their login history in one transaction.

    An admin may not delete their own account.  Grants held or issued by the
    user, and categories they created, are *not* cascaded: the store refuses
    the delete while such rows exist.
    """
    require_admin(caller, "Only administrators can delete users")
    user = get_user_or_404(db, user_id)
    if user_id == caller.user_id:
        raise SelfDeleteDenied()

    with transaction(db):
        db.query(LoginEvent).filter(LoginEvent.user_id == user_id).delete(synchronize_session=False)
        db.delete(user)

    logger.info("Admin id=%d deleted user id=%d", caller.user_id, user_id)
