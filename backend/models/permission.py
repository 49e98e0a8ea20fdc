"""PermissionGrant ORM model – the user ↔ category many-to-many ledger."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base


class PermissionGrant(Base):
    __tablename__ = "user_category_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Subject and granter keys do not cascade: deleting either user must not
    # silently erase grant history.
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    granted_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    granted_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    category = relationship("Category")
    granted_by = relationship("User", foreign_keys=[granted_by_user_id])

    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_user_category"),
    )
