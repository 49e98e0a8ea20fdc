"""Category ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    link = Column(String(2048), nullable=True)
    # Set once at creation; deleting the creator is refused by the store.
    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    created_by = relationship("User", lazy="joined")

    __table_args__ = (
        # Names are unique ignoring case; the service checks first, this
        # index is the final arbiter under concurrent inserts.
        Index("uq_categories_name_lower", func.lower(name), unique=True),
    )
