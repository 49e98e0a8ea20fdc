"""
Shared fixtures.

The environment is filled in *before* any application module is imported,
because ``core.config.settings`` is built at import time.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
# Keep PBKDF2 fast under test
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from auth import service as auth_service  # noqa: E402
from core.security import Identity  # noqa: E402
from database import Database  # noqa: E402
from main import create_app  # noqa: E402

ADMIN_PASSWORD = "Admin-pass-1"
USER_PASSWORD = "User-pass-1"


@pytest.fixture
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'test.db'}").open(create_schema=True)
    yield database
    database.close()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def client(database):
    app = create_app(database=database)
    with TestClient(app) as c:
        yield c


def identity_of(user) -> Identity:
    return Identity(user_id=user.id, role=user.role, username=user.username, email=user.email)


@pytest.fixture
def admin_user(db):
    return auth_service.register(db, "admin", "admin@example.com", ADMIN_PASSWORD, role="admin")


@pytest.fixture
def admin(admin_user):
    return identity_of(admin_user)


@pytest.fixture
def make_user(db):
    """Register a plain ``user`` account: make_user("alice")."""

    def _make(username, email=None, password=USER_PASSWORD, role=None):
        return auth_service.register(db, username, email or f"{username}@example.com", password, role=role)

    return _make


# -- HTTP helpers --------------------------------------------------------------


def register(client, username, password=USER_PASSWORD, role=None, email=None):
    body = {"username": username, "email": email or f"{username}@example.com", "password": password}
    if role is not None:
        body["role"] = role
    return client.post("/auth/register", json=body)


def login(client, identifier, password=USER_PASSWORD):
    return client.post("/auth/login", json={"usernameOrEmail": identifier, "password": password})


def bearer(client, identifier, password=USER_PASSWORD) -> dict:
    resp = login(client, identifier, password)
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def misses_first_check(real_check):
    """
    Wrap a uniqueness check so its first call answers "free", as if a
    concurrent writer inserted the same value right after the check.
    """
    calls = []

    def check(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return False
        return real_check(*args, **kwargs)

    return check
