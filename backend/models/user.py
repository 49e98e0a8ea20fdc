"""User ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Exact-match uniqueness (case-sensitive as stored)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Full passlib hash string; the salt is embedded in it.
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    # Plain string rather than an Enum so further roles need no migration
    role = Column(String(32), nullable=False, default="user")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
