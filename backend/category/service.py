"""
Category resource manager.

Reads are filtered by the grant ledger for non-admin callers; every write
is admin-only.  Name uniqueness ignores case, unlike usernames and emails.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import DuplicateName, Forbidden, NotFound
from core.logger import logger
from core.policy import can_read, can_write_category, is_admin
from core.security import Identity
from database import transaction
from models.category import Category
from models.permission import PermissionGrant
from category.schemas import CategoryResponse

UNKNOWN_CREATOR = "Unknown"

# Distinguishes "field not sent" from an explicit ``None``
UNSET = object()


def _require_writer(caller: Identity, message: str) -> None:
    if not can_write_category(caller.role):
        raise Forbidden(message)


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Category.id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None


def _get_or_404(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def to_response(category: Category) -> CategoryResponse:
    creator = category.created_by
    return CategoryResponse(
        id=category.id,
        name=category.name,
        content=category.content,
        link=category.link,
        created_at=category.created_at,
        updated_at=category.updated_at,
        created_by_username=creator.username if creator else UNKNOWN_CREATOR,
        created_by_user_id=category.created_by_user_id,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def list_categories(db: Session, caller: Identity) -> List[CategoryResponse]:
    """Admins see every category; other callers only the ones granted to them."""
    q = db.query(Category)
    if not is_admin(caller.role):
        q = q.join(PermissionGrant, PermissionGrant.category_id == Category.id).filter(
            PermissionGrant.user_id == caller.user_id
        )
    return [to_response(c) for c in q.order_by(Category.id).all()]


def get_category(db: Session, caller: Identity, category_id: int) -> CategoryResponse:
    category = _get_or_404(db, category_id)
    if not can_read(db, caller.role, caller.user_id, category_id):
        raise Forbidden("You don't have permission to access this category")
    return to_response(category)


# ---------------------------------------------------------------------------
# Writes (admin only)
# ---------------------------------------------------------------------------


def create_category(
    db: Session,
    caller: Identity,
    name: str,
    content: str,
    link: Optional[str] = None,
) -> int:
    """Create a category owned by the caller and return its id."""
    _require_writer(caller, "Only administrators can create categories")
    if _name_taken(db, name):
        raise DuplicateName()

    category = Category(
        name=name,
        content=content,
        link=link,
        created_by_user_id=caller.user_id,
        created_at=datetime.now(timezone.utc),
    )
    try:
        with transaction(db):
            db.add(category)
    except IntegrityError:
        # Lost a race against a concurrent insert of the same name
        if _name_taken(db, name):
            raise DuplicateName()
        raise

    logger.info("Admin id=%d created category id=%d name=%s", caller.user_id, category.id, name)
    return category.id


def update_category(
    db: Session,
    caller: Identity,
    category_id: int,
    name: Optional[str] = None,
    content: Optional[str] = None,
    link=UNSET,
) -> None:
    """
    Partial update.  Empty ``name`` / ``content`` leave the field alone;
    ``link`` is written whenever it is passed, including ``None``.  The
    update timestamp moves on every successful call.
    """
    _require_writer(caller, "Only administrators can update categories")
    category = _get_or_404(db, category_id)

    if name and name != category.name and _name_taken(db, name, exclude_id=category_id):
        raise DuplicateName()

    try:
        with transaction(db):
            if name:
                category.name = name
            if content:
                category.content = content
            if link is not UNSET:
                category.link = link
            category.updated_at = datetime.now(timezone.utc)
    except IntegrityError:
        if name and _name_taken(db, name, exclude_id=category_id):
            raise DuplicateName()
        raise

    logger.info("Admin id=%d updated category id=%d", caller.user_id, category_id)


def delete_category(db: Session, caller: Identity, category_id: int) -> None:
    """Delete the category's grants, then the category, as one unit."""
    _require_writer(caller, "Only administrators can delete categories")
    category = _get_or_404(db, category_id)

    with transaction(db):
        removed = (
            db.query(PermissionGrant)
            .filter(PermissionGrant.category_id == category_id)
            .delete(synchronize_session=False)
        )
        db.delete(category)

    logger.info(
        "Admin id=%d deleted category id=%d (%d grant(s) removed)",
        caller.user_id,
        category_id,
        removed,
    )
