"""
Authorization policy.

Two tiers: ``admin`` may do everything and bypasses per-category checks;
``user`` may only read categories it holds a grant for.  The role always
comes from the caller's token (``Identity.role``).
"""

from sqlalchemy.orm import Session

from core.errors import Forbidden
from core.security import Identity
from models.permission import PermissionGrant

ADMIN_ROLE = "admin"
USER_ROLE = "user"


def is_admin(role: str | None) -> bool:
    return role == ADMIN_ROLE


def has_grant(db: Session, user_id: int, category_id: int) -> bool:
    return (
        db.query(PermissionGrant.id)
        .filter(PermissionGrant.user_id == user_id, PermissionGrant.category_id == category_id)
        .first()
        is not None
    )


def can_read(db: Session, role: str | None, user_id: int, category_id: int) -> bool:
    """Admins read everything; anyone else needs a grant on the category."""
    if is_admin(role):
        return True
    return has_grant(db, user_id, category_id)


def can_write_category(role: str | None) -> bool:
    return is_admin(role)


def can_manage_permissions(role: str | None) -> bool:
    return is_admin(role)


def require_admin(caller: Identity, message: str = "Admin access required") -> None:
    """Raise ``Forbidden(message)`` unless the caller's token says admin."""
    if not is_admin(caller.role):
        raise Forbidden(message)
