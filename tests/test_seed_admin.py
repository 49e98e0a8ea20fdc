import importlib.util
from pathlib import Path

import pytest

from auth.service import authenticate
from core.policy import ADMIN_ROLE
from models.user import User

SCRIPT = Path(__file__).resolve().parent.parent / "bin" / "seed_admin.py"


@pytest.fixture(scope="module")
def seed_admin():
    spec = importlib.util.spec_from_file_location("seed_admin", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_seed_creates_admin(db, seed_admin):
    assert seed_admin.seed(db, "root", "root@example.com", "Root-pass-1") is True
    user = db.query(User).filter(User.username == "root").one()
    assert user.role == ADMIN_ROLE
    assert authenticate(db, "root", "Root-pass-1").role == ADMIN_ROLE


def test_seed_is_idempotent(db, seed_admin):
    seed_admin.seed(db, "root", "root@example.com", "Root-pass-1")
    assert seed_admin.seed(db, "root", "root@example.com", "Root-pass-1") is False
    assert db.query(User).count() == 1


def test_seed_needs_all_values(db, seed_admin):
    assert seed_admin.seed(db, "root", None, "Root-pass-1") is False
    assert db.query(User).count() == 0
