"""
Pydantic schemas for quizzes, attempts and results.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

QuestionType = Literal["multiple-choice", "true-false", "fill-in-blank", "matching", "saq"]


class QuestionBase(BaseModel):
    type: QuestionType
    question: str = Field(..., min_length=1)
    options: List[str] = []
    correct_answer: Union[bool, str, List[str]]
    explanation: Optional[str] = None
    difficulty: Optional[str] = "medium"
    topic: Optional[str] = None
    tags: List[str] = []


class QuestionCreate(QuestionBase):
    pass


class QuestionResponse(QuestionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int


class QuizCreate(BaseModel):
    """Schema for quiz creation."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    topic: Optional[str] = None
    difficulty: str = "medium"
    is_public: bool = False
    questions: List[QuestionCreate] = []


class QuizUpdate(BaseModel):
    """Schema for quiz update. Ownership and id are not updatable."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    is_public: Optional[bool] = None
    questions: Optional[List[QuestionCreate]] = None

    @field_validator("title", "difficulty", "is_public", "questions", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v


class QuizResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    is_public: bool
    created_by: int
    question_count: int
    questions: List[QuestionResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttemptAnswer(BaseModel):
    question_id: int
    user_answer: Any = None
    time_spent: Optional[float] = None


class AttemptUpdate(BaseModel):
    attempt_id: Optional[int] = None
    answers: List[AttemptAnswer] = []
    is_complete: bool = False
    time_spent: Optional[int] = None


class AttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    user_id: int
    answers: List[dict] = []
    score: float
    total_questions: int
    time_spent: int
    is_complete: bool
    started_at: datetime
    completed_at: Optional[datetime] = None


class QuizResultCreate(BaseModel):
    quiz_id: int
    score: int = Field(..., ge=0)
    time_spent: int = 0
    answers: List[dict] = []


class QuizResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    user_id: int
    score: int
    total_questions: int
    percentage_score: float
    time_spent: int
    answers: List[dict] = []
    completed_at: datetime
    improvement: Optional[str] = None
    streak: int
