"""
Central security module.  All credential primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. Claim resolution into an ``Identity``    (tolerates legacy claim names)
4. FastAPI dependency guard                 (get_current_identity)

The caller's role comes from the token and is trusted for the token's
lifetime.  A role change made by an admin applies from the next login.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from core.config import settings
from core.errors import Unauthenticated

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.

    Returns the full passlib hash string  e.g. "$pbkdf2-sha256$...".  The
    salt is embedded in it.
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # Malformed digest in storage – treat as a non-match
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """
    Sign a JWT with HS256 for *user*.

    Claims: sub / uid (user id), unique_name, email, role, plus iss, aud
    and exp.  Returns the encoded token and its expiry (UTC).
    """
    expires_at = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {
        "sub": str(user.id),
        "uid": str(user.id),
        "unique_name": user.username,
        "email": user.email,
        "role": user.role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": expires_at,
    }
    token = _jwt.encode(claims, settings.secret_key, algorithm="HS256")
    return token, expires_at


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises ``Unauthenticated`` on any failure
    (expired, bad signature, wrong issuer/audience, malformed).
    """
    try:
        return _jwt.decode(
            token,
            settings.secret_key,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except _jwt.InvalidTokenError:
        raise Unauthenticated("Invalid or expired token")


# ---------------------------------------------------------------------------
# 3.  Claims → Identity
# ---------------------------------------------------------------------------
# Tokens minted by older issuers used different claim names.  Order matters:
# the first key present wins.

NAME_IDENTIFIER_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier"
ROLE_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/role"

USER_ID_CLAIM_KEYS = ("uid", NAME_IDENTIFIER_CLAIM, "sub", "id")
ROLE_CLAIM_KEYS = ("role", ROLE_CLAIM)


@dataclass(frozen=True)
class Identity:
    """The caller as the token describes it.  Never re-read from storage."""

    user_id: int
    role: Optional[str]
    username: Optional[str] = None
    email: Optional[str] = None


def _first_claim(claims: dict, keys: tuple) -> Optional[str]:
    for key in keys:
        value = claims.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def identity_from_claims(claims: dict) -> Identity:
    """
    Build an :class:`Identity` from decoded token claims.

    Raises ``Unauthenticated`` if no subject-id claim is present or it is
    not an integer.
    """
    raw_id = _first_claim(claims, USER_ID_CLAIM_KEYS)
    if raw_id is None:
        raise Unauthenticated("User ID not found in token")
    try:
        user_id = int(raw_id)
    except ValueError:
        raise Unauthenticated("Invalid user ID format")

    return Identity(
        user_id=user_id,
        role=_first_claim(claims, ROLE_CLAIM_KEYS),
        username=claims.get("unique_name"),
        email=claims.get("email"),
    )


# ---------------------------------------------------------------------------
# 4.  FastAPI dependency guard
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs;
# the actual login endpoint is POST /auth/login (JSON body).  auto_error is
# off so a missing header is reported through Unauthenticated like any other
# token failure.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """
    Dependency: decode the JWT and return the caller's ``Identity``.

    Raises 401 if the header is missing, the token is invalid, or it carries
    no usable subject id.  No database lookup happens here.
    """
    if not token:
        raise Unauthenticated("Not authenticated")
    return identity_from_claims(decode_access_token(token))


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None
