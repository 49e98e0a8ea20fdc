"""
Permission grant ledger – which user may read which category.

A grant operation *replaces* the target user's whole grant set: the old
rows are deleted and the new ones inserted in the same transaction, so a
reader never sees a half-applied set.  Two admins granting to the same user
concurrently is last-writer-wins.
"""

from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy.orm import Session, aliased

from auth.service import get_user_or_404
from core.errors import Forbidden, InvalidReference, NotFound
from core.logger import logger
from core.policy import ADMIN_ROLE, can_manage_permissions
from core.security import Identity
from database import transaction
from models.category import Category
from models.permission import PermissionGrant
from models.user import User
from permission.schemas import CategoryPermissionInfo, UserPermissionResponse

UNKNOWN_GRANTER = "Unknown"


def _require_manager(caller: Identity, message: str) -> None:
    if not can_manage_permissions(caller.role):
        raise Forbidden(message)


def _unique_in_order(ids: Iterable[int]) -> List[int]:
    seen = set()
    result = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            result.append(i)
    return result


def _permissions_for(db: Session, user_id: int) -> List[CategoryPermissionInfo]:
    Granter = aliased(User)
    rows = (
        db.query(PermissionGrant, Category.name, Granter.username)
        .join(Category, PermissionGrant.category_id == Category.id)
        .outerjoin(Granter, PermissionGrant.granted_by_user_id == Granter.id)
        .filter(PermissionGrant.user_id == user_id)
        .order_by(PermissionGrant.category_id)
        .all()
    )
    return [
        CategoryPermissionInfo(
            category_id=grant.category_id,
            category_name=category_name,
            granted_at=grant.granted_at,
            granted_by_username=granter_username or UNKNOWN_GRANTER,
        )
        for grant, category_name, granter_username in rows
    ]


def _user_permission_set(db: Session, user: User) -> UserPermissionResponse:
    return UserPermissionResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        permissions=_permissions_for(db, user.id),
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def grant_permissions(db: Session, caller: Identity, user_id: int, category_ids: List[int]) -> User:
    """
    Replace *user_id*'s grants with exactly *category_ids*.

    Raises ``NotFound`` for an unknown user and ``InvalidReference`` naming
    every unknown category id (ascending).  Repeated ids count once.
    Returns the target user.
    """
    _require_manager(caller, "Only administrators can grant permissions")
    target = db.get(User, user_id)
    if target is None:
        raise NotFound("Target user not found")

    wanted = _unique_in_order(category_ids)
    existing = set()
    if wanted:
        existing = {row[0] for row in db.query(Category.id).filter(Category.id.in_(wanted))}
    missing = sorted(set(wanted) - existing)
    if missing:
        raise InvalidReference(
            "Categories not found: " + ", ".join(str(i) for i in missing)
        )

    now = datetime.now(timezone.utc)
    with transaction(db):
        db.query(PermissionGrant).filter(PermissionGrant.user_id == user_id).delete(
            synchronize_session=False
        )
        db.add_all([
            PermissionGrant(
                user_id=user_id,
                category_id=category_id,
                granted_at=now,
                granted_by_user_id=caller.user_id,
            )
            for category_id in wanted
        ])

    logger.info(
        "Admin id=%d set grants for user id=%d to %s",
        caller.user_id,
        user_id,
        wanted,
    )
    return target


def revoke_permission(db: Session, caller: Identity, user_id: int, category_id: int) -> None:
    """Remove the single (user, category) grant, leaving the rest untouched."""
    _require_manager(caller, "Only administrators can revoke permissions")
    grant = (
        db.query(PermissionGrant)
        .filter(PermissionGrant.user_id == user_id, PermissionGrant.category_id == category_id)
        .first()
    )
    if grant is None:
        raise NotFound("Permission not found")

    with transaction(db):
        db.delete(grant)

    logger.info(
        "Admin id=%d revoked category id=%d from user id=%d",
        caller.user_id,
        category_id,
        user_id,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def list_all_permissions(db: Session, caller: Identity) -> List[UserPermissionResponse]:
    """One entry per non-admin user, each with that user's full grant set."""
    _require_manager(caller, "Only administrators can view user permissions")
    users = db.query(User).filter(User.role != ADMIN_ROLE).order_by(User.id).all()
    return [_user_permission_set(db, u) for u in users]


def list_user_permissions(db: Session, caller: Identity, user_id: int) -> UserPermissionResponse:
    _require_manager(caller, "Only administrators can view user permissions")
    return _user_permission_set(db, get_user_or_404(db, user_id))
