"""
Pydantic schemas for the AI endpoints.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    message: Optional[str] = None
    prompt: Optional[str] = None
    stream: bool = False


class GenerateQuestionsRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    question_type: Literal["multiple-choice", "true-false", "saq"]
    difficulty: Literal["beginner", "intermediate", "advanced"]
    count: int = 3
    description: str = ""


class GenerateCaseRequest(BaseModel):
    specialty: str = Field(..., min_length=1)
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    additional_instructions: str = ""
    include_images: bool = False
    num_questions: int = Field(3, ge=1, le=10)


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    context: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
