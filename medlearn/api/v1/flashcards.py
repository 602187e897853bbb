"""
API endpoints for flashcards - categories, cards, spaced repetition and study sessions.
"""
from datetime import datetime, timedelta
from math import ceil
from typing import Any, List, Optional
import logging
import os
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import or_
from sqlalchemy.orm import Session

from medlearn.core.agents import AIResponseError, MedicalAIAgent, get_ai_agent
from medlearn.core.config import settings
from medlearn.core.dependencies import get_current_active_user
from medlearn.core.helpers.pdf_text import extract_pdf_text
from medlearn.core.stats_cache import stats_cache, stats_key
from medlearn.db.base import get_db
from medlearn.models.flashcard import Flashcard, FlashcardCategory, FlashcardSession
from medlearn.models.user import User
from medlearn.schemas.flashcard import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ConfidenceUpdate,
    FlashcardCreate,
    FlashcardResponse,
    FlashcardUpdate,
    SessionCreate,
    SessionResponse,
)
from medlearn.services.flashcard_stats import build_statistics
from medlearn.services.spaced_repetition import apply_confidence, is_valid_confidence
from medlearn.utils.file_upload import detect_content_type

logger = logging.getLogger(__name__)

router = APIRouter()

GENERATION_DIFFICULTIES = ("easy", "medium", "hard")


def _get_owned_category(db: Session, category_id: int, user: User) -> FlashcardCategory:
    category = db.query(FlashcardCategory).filter(FlashcardCategory.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    if category.user_id != user.id:
        raise HTTPException(status_code=403, detail="You do not have permission to add flashcards to this category")
    return category


def _adjust_category_count(category: Optional[FlashcardCategory], delta: int) -> None:
    if category is not None:
        category.flashcard_count = max(0, (category.flashcard_count or 0) + delta)  # type: ignore


# ============= Category Endpoints =============

@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    include_public: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's categories, plus everyone's public ones when ``include_public``."""
    query = db.query(FlashcardCategory)
    if include_public:
        query = query.filter(or_(FlashcardCategory.user_id == current_user.id, FlashcardCategory.is_public.is_(True)))
    else:
        query = query.filter(FlashcardCategory.user_id == current_user.id)
    return query.order_by(FlashcardCategory.name).all()


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Create a flashcard category."""
    category = FlashcardCategory(**category_in.model_dump(), user_id=current_user.id, flashcard_count=0)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Update one of the caller's categories."""
    category = db.query(FlashcardCategory).filter(
        FlashcardCategory.id == category_id, FlashcardCategory.user_id == current_user.id
    ).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    for field, value in category_in.model_dump(exclude_unset=True).items():
        setattr(category, field, value)
    db.commit()
    db.refresh(category)
    return category


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete one of the caller's categories and every card in it."""
    category = db.query(FlashcardCategory).filter(
        FlashcardCategory.id == category_id, FlashcardCategory.user_id == current_user.id
    ).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    db.query(FlashcardSession).filter(FlashcardSession.category_id == category_id).update(
        {FlashcardSession.category_id: None}, synchronize_session=False
    )
    db.delete(category)
    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    return {"message": "Category deleted successfully"}


# ============= Session Endpoints =============

@router.get("/sessions")
def list_sessions(
    category_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's study sessions, newest first."""
    query = db.query(FlashcardSession).filter(FlashcardSession.user_id == current_user.id)
    if category_id is not None:
        query = query.filter(FlashcardSession.category_id == category_id)

    total = query.count()
    sessions = (
        query.order_by(FlashcardSession.start_time.desc(), FlashcardSession.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "sessions": [SessionResponse.model_validate(s) for s in sessions],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": ceil(total / limit)},
    }


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    session_in: SessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Record a finished study session.

    The session is taken to have ended now and started ``total_time_spent``
    seconds earlier. The caller's cached statistics are dropped.
    """
    if session_in.category_id is not None:
        category = db.query(FlashcardCategory).filter(FlashcardCategory.id == session_in.category_id).first()
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

    end_time = datetime.now()
    session = FlashcardSession(
        **session_in.model_dump(),
        user_id=current_user.id,
        start_time=end_time - timedelta(seconds=session_in.total_time_spent),
        end_time=end_time,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    return session


@router.get("/sessions/stats")
def get_session_statistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Study statistics for the caller, served from a five minute cache."""
    user_id = int(current_user.id)  # type: ignore
    return stats_cache.get_or_build(stats_key(user_id), lambda: build_statistics(db, user_id))


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """One of the caller's study sessions."""
    session = db.query(FlashcardSession).filter(
        FlashcardSession.id == session_id, FlashcardSession.user_id == current_user.id
    ).first()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ============= AI Generation =============

@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_flashcards(
    category_id: int = Form(...),
    topic: Optional[str] = Form(None),
    num_cards: int = Form(5),
    difficulty: str = Form("medium"),
    is_public: bool = Form(False),
    pdf: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    agent: MedicalAIAgent = Depends(get_ai_agent),
) -> Any:
    """
    Generate a set of flashcards with AI from a topic or an uploaded PDF.

    All generated cards share a new ``set_id`` and are tagged with the topic.
    """
    topic = (topic or "").strip() or None
    if not topic and pdf is None:
        raise HTTPException(status_code=400, detail="Either topic or PDF file is required")
    if difficulty not in GENERATION_DIFFICULTIES:
        raise HTTPException(status_code=400, detail="Difficulty must be easy, medium or hard")
    num_cards = min(max(1, num_cards), settings.MAX_GENERATED_FLASHCARDS)

    category = _get_owned_category(db, category_id, current_user)

    source_text = None
    if pdf is not None:
        pdf_bytes = await pdf.read()
        if detect_content_type(pdf_bytes) != "application/pdf":
            raise HTTPException(status_code=400, detail="Only PDF files are supported")
        try:
            source_text = extract_pdf_text(pdf_bytes)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not source_text.strip():
            raise HTTPException(status_code=400, detail="No text could be extracted from the PDF")

    topic_name = topic or os.path.splitext(pdf.filename or "Document")[0]  # type: ignore

    try:
        generated = await run_in_threadpool(
            agent.generate_flashcards, topic_name, num_cards, difficulty, source_text
        )
    except AIResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not generated:
        raise HTTPException(status_code=502, detail="AI did not generate valid flashcards")

    set_id = uuid.uuid4().hex
    now = datetime.now()
    cards = []
    for item in generated:
        tags = list(dict.fromkeys([*item["tags"], topic_name]))
        card = Flashcard(
            question=item["question"],
            answer=item["answer"],
            category_id=category.id,
            user_id=current_user.id,
            tags=tags,
            difficulty=difficulty,
            confidence_level=3,
            next_review_date=now,
            review_count=0,
            is_public=is_public,
            set_id=set_id,
            topic_name=topic_name,
        )
        db.add(card)
        cards.append(card)
    _adjust_category_count(category, len(cards))
    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    for card in cards:
        db.refresh(card)

    logger.info(f"Generated {len(cards)} flashcards in set {set_id} for user {current_user.id}")
    return {
        "message": f"Generated {len(cards)} flashcards",
        "set_id": set_id,
        "topic_name": topic_name,
        "flashcards": [FlashcardResponse.model_validate(c) for c in cards],
    }


# ============= Flashcard Endpoints =============

def _group_by_set(cards: List[Flashcard]) -> List[dict]:
    sets: dict = {}
    for card in cards:
        if not card.set_id:
            continue
        entry = sets.get(card.set_id)
        if entry is None:
            entry = sets[card.set_id] = {
                "set_id": card.set_id,
                "topic_name": card.topic_name,
                "category_id": card.category_id,
                "card_count": 0,
                "created_at": card.created_at,
                "sample_card": FlashcardResponse.model_validate(card),
            }
        entry["card_count"] += 1
    return list(sets.values())


@router.get("")
def list_flashcards(
    category_id: Optional[int] = None,
    is_public: Optional[bool] = None,
    due_only: bool = False,
    set_id: Optional[str] = None,
    group_by_set: bool = False,
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    List flashcards.

    Args:
        category_id: Only cards in this category
        is_public: True for everyone's public cards; otherwise the caller's own
        due_only: Only cards whose next review date has passed
        set_id: Only cards from one generated set
        group_by_set: Return one entry per set instead of individual cards
        limit: Page size
        skip: Number of cards to skip
    """
    query = db.query(Flashcard)
    if is_public:
        query = query.filter(Flashcard.is_public.is_(True))
    else:
        query = query.filter(Flashcard.user_id == current_user.id)
    if category_id is not None:
        query = query.filter(Flashcard.category_id == category_id)
    if due_only:
        query = query.filter(Flashcard.next_review_date <= datetime.now())
    if set_id:
        query = query.filter(Flashcard.set_id == set_id)

    if group_by_set:
        cards = query.filter(Flashcard.set_id.isnot(None)).order_by(Flashcard.created_at.desc(), Flashcard.id.desc()).all()
        return {"sets": _group_by_set(cards)}

    total = query.count()
    cards = (
        query.order_by(Flashcard.next_review_date, Flashcard.id)
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {
        "flashcards": [FlashcardResponse.model_validate(c) for c in cards],
        "pagination": {"total": total, "limit": limit, "skip": skip, "has_more": skip + len(cards) < total},
    }


@router.post("", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
def create_flashcard(
    card_in: FlashcardCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Create a flashcard, due for review immediately."""
    category = _get_owned_category(db, card_in.category_id, current_user)

    card = Flashcard(
        **card_in.model_dump(),
        user_id=current_user.id,
        confidence_level=3,
        next_review_date=datetime.now(),
        review_count=0,
    )
    db.add(card)
    _adjust_category_count(category, 1)
    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    db.refresh(card)
    return card


@router.patch("/{flashcard_id}", response_model=FlashcardResponse)
def update_flashcard(
    flashcard_id: int,
    card_in: FlashcardUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Update one of the caller's flashcards.

    ``review_result`` (1-5) records a review and reschedules the card.
    """
    card = db.query(Flashcard).filter(Flashcard.id == flashcard_id, Flashcard.user_id == current_user.id).first()
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")

    if card_in.review_result is not None and not is_valid_confidence(card_in.review_result):
        raise HTTPException(status_code=400, detail="Review result must be between 1 and 5")

    for field, value in card_in.model_dump(exclude_unset=True, exclude={"review_result"}).items():
        setattr(card, field, value)
    if card_in.review_result is not None:
        apply_confidence(card, card_in.review_result)

    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    db.refresh(card)
    return card


@router.delete("/{flashcard_id}")
def delete_flashcard(
    flashcard_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete one of the caller's flashcards."""
    card = db.query(Flashcard).filter(Flashcard.id == flashcard_id, Flashcard.user_id == current_user.id).first()
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")

    _adjust_category_count(card.category, -1)
    db.delete(card)
    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    return {"message": "Flashcard deleted successfully"}


@router.patch("/{flashcard_id}/confidence", response_model=FlashcardResponse)
def update_confidence(
    flashcard_id: int,
    body: ConfidenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Record how confidently the caller recalled a card and schedule its next review.

    Confidence 1-5 maps to a review in 1, 3, 7, 14 or 30 days.
    """
    if not is_valid_confidence(body.confidence_level):
        raise HTTPException(status_code=400, detail="Confidence level must be between 1 and 5")

    card = db.query(Flashcard).filter(Flashcard.id == flashcard_id).first()
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    if card.user_id != current_user.id and not card.is_public:
        raise HTTPException(status_code=403, detail="You do not have permission to review this flashcard")

    apply_confidence(card, body.confidence_level)
    db.commit()
    stats_cache.invalidate(stats_key(int(current_user.id)))  # type: ignore
    db.refresh(card)
    return card
