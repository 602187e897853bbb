"""
Pydantic schemas for clinical cases, ratings, comments and bookmarks.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CaseDifficulty = Literal["beginner", "intermediate", "advanced"]


class CaseAnswer(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    explanation: Optional[str] = None
    image_url: Optional[str] = None


class CaseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tags: List[str] = []
    media_urls: List[str] = []
    specialties: List[str] = []
    difficulty: CaseDifficulty = "intermediate"
    answers: List[CaseAnswer] = []


class CaseCreate(CaseBase):
    """Schema for case creation."""

    is_ai_generated: bool = False


class CaseUpdate(BaseModel):
    """Schema for case update; omitted fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    media_urls: Optional[List[str]] = None
    specialties: Optional[List[str]] = None
    difficulty: Optional[CaseDifficulty] = None
    answers: Optional[List[CaseAnswer]] = None

    @field_validator(
        "title", "description", "content", "category", "tags",
        "media_urls", "specialties", "difficulty", "answers",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v):
        """Omitted fields are kept; an explicit null is rejected."""
        if v is None:
            raise ValueError("Field may not be null")
        return v


class CaseResponse(CaseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_ai_generated: bool
    created_by: int
    rating_count: int
    rating_avg: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class CaseListResponse(BaseModel):
    cases: List[CaseResponse]
    pagination: Pagination


class RatingRequest(BaseModel):
    rating: int


class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    user_id: int
    user_name: str
    user_image: Optional[str] = None
    content: str
    parent_id: Optional[int] = None
    likes: List[int] = []
    reply_count: int
    is_edited: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookmarkRequest(BaseModel):
    case_id: Optional[int] = None
