"""
Pydantic schemas for flashcards, categories and study sessions.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FlashcardDifficulty = Literal["easy", "medium", "hard"]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: str = "#4f46e5"
    icon: str = "book"
    is_public: bool = False


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("name", "color", "icon", "is_public", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    color: str
    icon: str
    is_public: bool
    user_id: int
    flashcard_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FlashcardCreate(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    category_id: int
    tags: List[str] = []
    difficulty: FlashcardDifficulty = "medium"
    is_public: bool = False


class FlashcardUpdate(BaseModel):
    question: Optional[str] = Field(None, min_length=1)
    answer: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    difficulty: Optional[FlashcardDifficulty] = None
    is_public: Optional[bool] = None
    review_result: Optional[int] = None

    @field_validator("question", "answer", "tags", "difficulty", "is_public", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v


class ConfidenceUpdate(BaseModel):
    confidence_level: int


class FlashcardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    answer: str
    category_id: int
    user_id: int
    tags: List[str] = []
    difficulty: str
    confidence_level: int
    next_review_date: datetime
    last_reviewed: Optional[datetime] = None
    review_count: int
    is_public: bool
    set_id: Optional[str] = None
    topic_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionCreate(BaseModel):
    category_id: Optional[int] = None
    set_id: Optional[str] = None
    topic_name: Optional[str] = None
    cards_studied: int = Field(0, ge=0)
    correct_answers: int = Field(0, ge=0)
    incorrect_answers: int = Field(0, ge=0)
    skipped_cards: int = Field(0, ge=0)
    total_time_spent: int = Field(0, ge=0)


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category_id: Optional[int] = None
    set_id: Optional[str] = None
    topic_name: Optional[str] = None
    cards_studied: int
    correct_answers: int
    incorrect_answers: int
    skipped_cards: int
    total_time_spent: int
    start_time: datetime
    end_time: datetime
