"""
Password hashing and the JWT that identifies a user.

The same token is handed out in the login response body and in the
session cookie, so both transports are verified the same way.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from medlearn.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"


def create_access_token(user_id: int, role: str = "student", expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue an access token for a user.

    Args:
        user_id: Stored as the ``sub`` claim
        role: Copied into the token for clients; never trusted server-side
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify signature and expiry; None when either check fails."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def user_id_from_token(token: str) -> Optional[int]:
    """The user id carried by a valid access token, or None."""
    claims = decode_token(token)
    if not claims or claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    subject = str(claims.get("sub") or "")
    return int(subject) if subject.isdigit() else None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
