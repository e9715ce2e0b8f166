"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       username (sub), the admin flag, and expiry. Verification returns None
       on any failure -- the policy layer turns that into "Unauthorized".

  Passwords: bcrypt, cost factor from Settings.bcrypt_rounds. The _DUMMY_HASH
       constant enables timing equalization in authenticate_user() so response
       time does not reveal whether a username exists.

  SECRET_KEY: sourced from core.config.get_settings(). Dev mode (DEBUG=true)
       auto-generates a random key; production mode refuses to start without
       one.

Layer rule: no imports from api/ or jobs/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import CallerIdentity
from core.config import get_settings

if TYPE_CHECKING:
    from users.store import UserStore

logger = logging.getLogger("jobly.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt truncates input past 72 bytes; the validation layer caps passwords
    at 20 characters, well below that.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage -- treat as a failed match.
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("jobly_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(identity: CallerIdentity, expire_seconds: int = 0) -> str:
    """Encode a signed JWT for the given identity.

    Args:
        identity:       Username and admin flag to embed in the token.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": identity.username,
        "is_admin": identity.is_admin,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> CallerIdentity | None:
    """Decode and verify a JWT. Returns the caller identity or None on any failure.

    Expired, tampered, and structurally incomplete tokens are all treated the
    same as "no token at all".
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    username = payload.get("sub")
    is_admin = payload.get("is_admin")
    if not isinstance(username, str) or not username or not isinstance(is_admin, bool):
        return None
    return CallerIdentity(username=username, is_admin=is_admin)


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> CallerIdentity | None:
    """Authenticate a username/password pair with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the caller identity on success, None on any failure.
    """
    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        logger.info("Failed login for %s", username)
        return None
    return CallerIdentity(username=user.username, is_admin=user.is_admin)
