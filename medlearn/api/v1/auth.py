"""
Authentication endpoints for user registration, login and logout.
"""
from datetime import datetime
from typing import Any
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from medlearn.core.config import settings
from medlearn.core.dependencies import get_current_active_user
from medlearn.core.security import create_access_token, get_password_hash, verify_password
from medlearn.db.base import get_db
from medlearn.models.user import User
from medlearn.schemas.user import Token, User as UserSchema, UserCreate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new user.

    Args:
        user_in: User registration data
        db: Database session

    Returns:
        Created user

    Raises:
        HTTPException: If email already exists
    """
    email = user_in.email.lower()
    user = db.query(User).filter(User.email == email).first()
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    user = User(
        email=email,
        name=user_in.name,
        hashed_password=get_password_hash(user_in.password),
        role="student",
        is_active=True,
        profile={},
        preferences={"notifications": True, "language": "en", "theme": "system"},
        achievements=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


@router.post("/login", response_model=Token)
def login(
    response: Response,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    Login user, return a JWT and set it as the session cookie.

    Args:
        response: Outgoing response (for the cookie)
        db: Database session
        form_data: OAuth2 form data (username is the email)

    Returns:
        JWT access token

    Raises:
        HTTPException: If credentials are invalid
    """
    user = db.query(User).filter(User.email == form_data.username.lower()).first()

    if not user or not user.hashed_password or not verify_password(form_data.password, user.hashed_password): # type: ignore
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active: # type: ignore
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )

    expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    access_token = create_access_token(user.id, role=user.role or "student")  # type: ignore
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=expires_in,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )

    user.last_login = datetime.now()  # type: ignore
    db.commit()

    return {"access_token": access_token, "token_type": "bearer", "expires_in": expires_in}


@router.post("/logout")
def logout(response: Response) -> Any:
    """Clear the session cookie."""
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(get_current_active_user)) -> Any:
    """
    Get current authenticated user.

    Args:
        current_user: Current authenticated user

    Returns:
        Current user data
    """
    return current_user
