"""
Bootstrap script – creates the first admin user.

Run once after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_USERNAME, FIRST_ADMIN_EMAIL and
FIRST_ADMIN_PASSWORD from etc/app.conf.  After the row is inserted those
values are no longer used by the application.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from auth.service import register         # noqa: E402
from core.config import settings          # noqa: E402
from core.errors import DuplicateEmail, DuplicateUsername  # noqa: E402
from core.logger import logger            # noqa: E402
from core.policy import ADMIN_ROLE        # noqa: E402
from database import Database             # noqa: E402


def seed(db, username: str, email: str, password: str) -> bool:
    """
    Register *username* as an admin.  Returns False (and changes nothing)
    if the inputs are incomplete or the username / email is already taken.
    """
    if not username or not email or not password:
        logger.warning("[seed_admin] FIRST_ADMIN_* not set in etc/app.conf – nothing to do.")
        return False

    try:
        register(db, username=username, email=email, password=password, role=ADMIN_ROLE)
    except (DuplicateUsername, DuplicateEmail):
        logger.info("[seed_admin] Admin '%s' already exists – skipping.", username)
        return False

    logger.info("[seed_admin] Admin '%s' created successfully.", username)
    return True


def main() -> None:
    database = Database(settings.database_url).open()
    db = database.session()
    try:
        seed(
            db,
            settings.first_admin_username,
            settings.first_admin_email,
            settings.first_admin_password,
        )
    finally:
        db.close()
        database.close()


if __name__ == "__main__":
    main()
