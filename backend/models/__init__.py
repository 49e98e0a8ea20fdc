"""SQLAlchemy ORM models."""

from models.user import User
from models.login_event import LoginEvent
from models.category import Category
from models.permission import PermissionGrant

__all__ = ["User", "LoginEvent", "Category", "PermissionGrant"]
