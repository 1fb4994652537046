"""Password hashing and the access/refresh JWT pair.

Tokens carry only the user id and a ``type`` claim; roles and profile data are
always read from the database so a demoted admin loses rights immediately.
"""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from unknown_items.core.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    # OAuth-only accounts have no password hash
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(subject: str | UUID, token_type: str, lifetime: timedelta) -> str:
    claims = {
        "sub": str(subject),
        "type": token_type,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str | UUID) -> str:
    return _encode(subject, ACCESS_TOKEN, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(subject: str | UUID) -> str:
    return _encode(subject, REFRESH_TOKEN, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str, token_type: str | None = None) -> dict | None:
    """Verified claims, or None for a bad signature, an expired token or the wrong type."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if token_type is not None and payload.get("type") != token_type:
        return None
    return payload


def token_subject(token: str, token_type: str) -> UUID | None:
    """User id from a valid token of the given type."""
    payload = decode_token(token, token_type)
    if not payload:
        return None
    try:
        return UUID(payload.get("sub") or "")
    except ValueError:
        return None
