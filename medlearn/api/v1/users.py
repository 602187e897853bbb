"""
API endpoints for the user profile and gamification progress.
"""
from typing import Any
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from medlearn.core.dependencies import get_current_active_user
from medlearn.db.base import get_db
from medlearn.models.user import User
from medlearn.schemas.user import (
    ActivityRequest,
    StudyTimeRequest,
    User as UserSchema,
    UserUpdate,
    XPRequest,
)
from medlearn.services import gamification

logger = logging.getLogger(__name__)

router = APIRouter()


def _apply(db: Session, user: User, action) -> dict:
    """Run a gamification mutation, translating domain errors to 400."""
    try:
        result = action()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    db.refresh(user)
    return result


# ============= Profile Endpoints =============

@router.get("/profile", response_model=UserSchema)
def view_profile(current_user: User = Depends(get_current_active_user)) -> Any:
    """Profile of the currently authenticated user."""
    return current_user


@router.put("/profile", response_model=UserSchema)
def update_profile(
    updated_user: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Update the current user's name, image, profile details and preferences.

    Profile and preferences are merged into the stored values, so a client
    may send only the keys it changed.
    """
    if updated_user.name is not None:
        current_user.name = updated_user.name  # type: ignore
    if updated_user.image is not None:
        current_user.image = updated_user.image  # type: ignore
    if updated_user.profile is not None:
        current_user.profile = {  # type: ignore
            **(current_user.profile or {}),
            **updated_user.profile.model_dump(mode="json", exclude_unset=True),
        }
    if updated_user.preferences is not None:
        current_user.preferences = {  # type: ignore
            **(current_user.preferences or {}),
            **updated_user.preferences.model_dump(mode="json", exclude_unset=True),
        }

    db.commit()
    db.refresh(current_user)
    logger.info(f"Updated profile for user {current_user.id}")
    return current_user


# ============= Gamification Endpoints =============

@router.get("/profile/gamification")
def get_gamification(current_user: User = Depends(get_current_active_user)) -> Any:
    """XP, level, streaks, counters and unlocked achievements."""
    return gamification.gamification_summary(current_user)


@router.post("/profile/xp")
def add_xp(
    body: XPRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """Award XP; returns the new total, level and any new achievements."""
    return _apply(db, current_user, lambda: gamification.add_xp(current_user, body.amount))  # type: ignore


@router.post("/profile/activity")
def record_activity(
    body: ActivityRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Record a flashcard review or a completed quiz.

    Args:
        body: ``activity_type`` plus ``is_correct`` for flashcards, or
            ``correct_answers`` and ``total_questions`` for quizzes
    """
    if body.activity_type == "flashcard":
        if body.is_correct is None:
            raise HTTPException(status_code=400, detail="is_correct is required for flashcard activity")
        action = lambda: gamification.record_flashcard_activity(current_user, body.is_correct)  # type: ignore
    else:
        if body.correct_answers is None or body.total_questions is None:
            raise HTTPException(
                status_code=400,
                detail="correct_answers and total_questions are required for quiz activity",
            )
        action = lambda: gamification.record_quiz_activity(  # type: ignore
            current_user, body.correct_answers, body.total_questions  # type: ignore
        )
    return _apply(db, current_user, action)


@router.post("/profile/streak")
def update_streak(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """Register today's study activity for the streak counter."""
    return _apply(db, current_user, lambda: gamification.update_streak(current_user))


@router.post("/profile/study-time")
def add_study_time(
    body: StudyTimeRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """Add study minutes (1 XP per minute)."""
    return _apply(db, current_user, lambda: gamification.record_study_time(current_user, body.minutes))  # type: ignore
