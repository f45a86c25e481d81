"""Password hashing and bearer tokens for budget owners."""

import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from components.core.config import get_settings

settings = get_settings()

ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
SALT_BYTES = 32


def get_password_hash(password: str, salt: Optional[str] = None) -> str:
    """Hash a password as ``salt:sha256(salt + password)``."""
    salt = salt or os.urandom(SALT_BYTES).hex()
    digest = hashlib.sha256((salt + password).encode()).hexdigest()
    return f"{salt}:{digest}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    salt, sep, _ = hashed_password.partition(":")
    if not sep:
        return False
    return hmac.compare_digest(get_password_hash(plain_password, salt), hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``data`` into a JWT that expires after ``expires_delta``."""
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Return the token claims, or None when the signature or expiry is bad."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def token_subject(token: str) -> Optional[int]:
    """User id carried in the ``sub`` claim of a valid token."""
    payload = verify_token(token)
    if not payload or payload.get("sub") is None:
        return None
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        return None
