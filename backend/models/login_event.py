"""LoginEvent ORM model – append-only trail of successful logins."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from database import Base


class LoginEvent(Base):
    __tablename__ = "user_logins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No ON DELETE action: the user-delete operation removes these rows
    # itself, in the same transaction, before the user row.
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    login_time = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    ip_address = Column(String(45), nullable=True)  # supports IPv6
    user_agent = Column(String(512), nullable=True)
