"""
Pydantic schemas for User model.
"""
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)


class UserProfileData(BaseModel):
    """Free-form profile details."""

    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    education: Optional[str] = None
    interests: List[str] = []
    bio: Optional[str] = Field(None, max_length=1000)
    social_links: Dict[str, str] = {}


class UserPreferences(BaseModel):
    """User interface preferences."""

    notifications: bool = True
    language: Literal["en", "es", "fr"] = "en"
    theme: Literal["light", "dark", "system"] = "system"


class UserUpdate(BaseModel):
    """Schema for profile update."""

    name: Optional[str] = Field(None, min_length=2)
    image: Optional[str] = None
    profile: Optional[UserProfileData] = None
    preferences: Optional[UserPreferences] = None


class User(BaseModel):
    """Schema for user response."""

    id: int
    email: EmailStr
    name: Optional[str] = None
    role: str
    image: Optional[str] = None
    is_active: bool
    profile: Optional[dict] = None
    preferences: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class Token(BaseModel):
    """Schema for JWT token."""

    access_token: str
    expires_in: int
    token_type: str


class XPRequest(BaseModel):
    amount: int


class ActivityRequest(BaseModel):
    activity_type: Literal["flashcard", "quiz"]
    is_correct: Optional[bool] = None
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None


class StudyTimeRequest(BaseModel):
    minutes: int
