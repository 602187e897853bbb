"""
Dependency injection for FastAPI endpoints.
"""
from typing import Optional, cast

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from medlearn.core.config import settings
from medlearn.core.security import user_id_from_token
from medlearn.db.base import get_db
from medlearn.models.user import User

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


def _resolve_token(request: Request, bearer_token: Optional[str]) -> Optional[str]:
    """Prefer the Authorization header, fall back to the session cookie."""
    if bearer_token:
        return bearer_token
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def _user_from_token(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None

    user_id = user_id_from_token(token)
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """
    Get current authenticated user from a bearer token or session cookie.

    Args:
        request: Incoming request (for the session cookie)
        db: Database session
        token: JWT token from the Authorization header

    Returns:
        Current user

    Raises:
        HTTPException: If token is missing, invalid or user not found
    """
    user = _user_from_token(db, _resolve_token(request, token))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Get current active user.

    Args:
        current_user: Current authenticated user

    Returns:
        Current active user

    Raises:
        HTTPException: If user is inactive
    """
    if not cast(bool, current_user.is_active):
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[User]:
    """Return the caller when credentials are valid, otherwise None."""
    user = _user_from_token(db, _resolve_token(request, token))
    if user is not None and not user.is_active:
        return None
    return user
