"""
API endpoints relaying prompts to the medical education assistant.
"""
from typing import Any, Iterator
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse

from medlearn.core.agents import AIResponseError, MedicalAIAgent, get_ai_agent
from medlearn.core.config import settings
from medlearn.core.dependencies import get_current_active_user
from medlearn.models.user import User
from medlearn.schemas.ai import (
    ChatRequest,
    ChatResponse,
    GenerateCaseRequest,
    GenerateQuestionsRequest,
    PromptRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _failed_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"text": "", "error": "Failed to get AI response"},
    )


def _chain(first: str, rest: Iterator[str]) -> Iterator[str]:
    if first:
        yield first
    yield from rest


@router.post("")
async def ask(
    body: PromptRequest,
    current_user: User = Depends(get_current_active_user),
    agent: MedicalAIAgent = Depends(get_ai_agent),
) -> Any:
    """
    Answer a free-form prompt.

    Args:
        body: ``message`` or ``prompt``, and ``stream`` to receive plain text
            chunks as they are generated

    Returns:
        ``{"text": ...}`` or a text/plain stream
    """
    prompt = (body.message or body.prompt or "").strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Message or prompt is required")

    if body.stream:
        chunks = agent.stream(prompt)
        # A failure before the first chunk is answered with the JSON error body
        try:
            first = await run_in_threadpool(next, chunks, "")
        except Exception as e:
            logger.error(f"AI stream failed for user {current_user.id}: {e}")
            return _failed_response()
        return StreamingResponse(_chain(first, chunks), media_type="text/plain; charset=utf-8")

    try:
        text = await run_in_threadpool(agent.complete, prompt)
    except Exception as e:
        logger.error(f"AI request failed for user {current_user.id}: {e}")
        return _failed_response()
    return {"text": text}


@router.post("/generate-questions")
async def generate_questions(
    body: GenerateQuestionsRequest,
    current_user: User = Depends(get_current_active_user),
    agent: MedicalAIAgent = Depends(get_ai_agent),
) -> Any:
    """Generate 1-10 quiz questions of one type for a topic."""
    count = min(max(1, body.count), settings.MAX_GENERATED_QUESTIONS)
    try:
        questions = await run_in_threadpool(
            agent.generate_questions, body.topic, body.question_type, body.difficulty, count, body.description
        )
    except AIResponseError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"questions": questions}


@router.post("/generate-case")
async def generate_case(
    body: GenerateCaseRequest,
    current_user: User = Depends(get_current_active_user),
    agent: MedicalAIAgent = Depends(get_ai_agent),
) -> Any:
    """Generate a clinical case draft; the client saves it through POST /cases."""
    try:
        case = await run_in_threadpool(
            agent.generate_case,
            body.specialty,
            body.difficulty,
            body.additional_instructions,
            body.include_images,
            body.num_questions,
        )
    except AIResponseError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    case["is_ai_generated"] = True
    return {"case": case}


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    current_user: User = Depends(get_current_active_user),
    agent: MedicalAIAgent = Depends(get_ai_agent),
) -> Any:
    """Ask the AI tutor a question, optionally grounded in study context."""
    response = await run_in_threadpool(agent.chat, body.message, body.context)
    return {"response": response}
