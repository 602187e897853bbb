"""
API endpoints for quizzes: authoring, attempts, results and analytics.
"""
from datetime import datetime
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from medlearn.core.dependencies import get_current_active_user
from medlearn.db.base import get_db
from medlearn.models.quiz import Quiz, QuizAttempt, QuizQuestion, QuizResult
from medlearn.models.user import User
from medlearn.schemas.quiz import (
    AttemptResponse,
    AttemptUpdate,
    QuestionCreate,
    QuestionResponse,
    QuizCreate,
    QuizResponse,
    QuizResultCreate,
    QuizResultResponse,
    QuizUpdate,
)
from medlearn.services import gamification
from medlearn.services.quiz_analytics import (
    compute_analytics,
    improvement_since,
    next_result_streak,
    user_result_stats,
)
from medlearn.services.quiz_grading import grade_answer

logger = logging.getLogger(__name__)

router = APIRouter()


# ============= Helpers =============

def _build_questions(questions: List[QuestionCreate]) -> List[QuizQuestion]:
    return [
        QuizQuestion(position=i, **q.model_dump())
        for i, q in enumerate(questions)
    ]


def _get_quiz_or_404(db: Session, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


def _get_accessible_quiz(db: Session, quiz_id: int, user: User) -> Quiz:
    quiz = _get_quiz_or_404(db, quiz_id)
    if not quiz.is_public and quiz.created_by != user.id:
        raise HTTPException(status_code=403, detail="You do not have permission to access this quiz")
    return quiz


def _record_result(
    db: Session,
    quiz: Quiz,
    user: User,
    score: int,
    total_questions: int,
    time_spent: int,
    answers: list,
    completed_at: datetime,
) -> QuizResult:
    """Store a result, deriving improvement and streak from the previous one."""
    previous = (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user.id, QuizResult.quiz_id == quiz.id)
        .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
        .first()
    )
    result = QuizResult(
        quiz_id=quiz.id,
        user_id=user.id,
        score=score,
        total_questions=total_questions,
        time_spent=time_spent,
        answers=answers,
        completed_at=completed_at,
        improvement=improvement_since(previous, score, total_questions),
        streak=next_result_streak(previous, completed_at),
    )
    db.add(result)
    return result


# ============= Quiz Endpoints =============

@router.get("", response_model=List[QuizResponse])
def list_quizzes(
    topic: Optional[str] = None,
    difficulty: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Public quizzes plus the caller's own, newest first."""
    query = db.query(Quiz).filter(or_(Quiz.is_public.is_(True), Quiz.created_by == current_user.id))
    if topic:
        query = query.filter(Quiz.topic == topic)
    if difficulty:
        query = query.filter(Quiz.difficulty == difficulty)
    return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()


@router.post("", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Create a quiz with its questions."""
    quiz = Quiz(
        **quiz_in.model_dump(exclude={"questions"}),
        created_by=current_user.id,
        questions=_build_questions(quiz_in.questions),
    )
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info(f"User {current_user.id} created quiz {quiz.id} with {quiz.question_count} questions")
    return quiz


@router.get("/mine", response_model=List[QuizResponse])
def list_my_quizzes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Quizzes created by the caller."""
    return (
        db.query(Quiz)
        .filter(Quiz.created_by == current_user.id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        .all()
    )


@router.get("/topics", response_model=List[str])
def list_topics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Sorted distinct topics across public quizzes and the caller's own."""
    rows = (
        db.query(Quiz.topic)
        .filter(or_(Quiz.is_public.is_(True), Quiz.created_by == current_user.id))
        .filter(Quiz.topic.isnot(None), Quiz.topic != "")
        .distinct()
        .all()
    )
    return sorted(row[0] for row in rows)


# ============= Result Endpoints =============

@router.post("/results", status_code=status.HTTP_201_CREATED)
def submit_result(
    body: QuizResultCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Submit a finished quiz result.

    ``score`` is the number of correct answers; the total is taken from the
    quiz itself.
    """
    quiz = _get_accessible_quiz(db, body.quiz_id, current_user)
    total_questions = quiz.question_count
    if body.score > total_questions:
        raise HTTPException(status_code=400, detail="Score cannot exceed the number of questions")

    result = _record_result(
        db, quiz, current_user, body.score, total_questions, body.time_spent,
        body.answers, datetime.now(),
    )
    db.commit()
    db.refresh(result)

    return {
        "message": "Quiz result submitted successfully",
        "result": QuizResultResponse.model_validate(result),
        "questions": [QuestionResponse.model_validate(q) for q in quiz.questions],
    }


@router.get("/results")
def list_results(
    quiz_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's results, newest first, with summary stats over all of them."""
    all_results = db.query(QuizResult).filter(QuizResult.user_id == current_user.id).all()
    results = [r for r in all_results if quiz_id is None or r.quiz_id == quiz_id]
    results.sort(key=lambda r: (r.completed_at, r.id), reverse=True)
    return {
        "results": [QuizResultResponse.model_validate(r) for r in results],
        "stats": user_result_stats(all_results),
    }


@router.get("/results/{result_id}", response_model=QuizResultResponse)
def get_result(
    result_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """One of the caller's results."""
    result = db.query(QuizResult).filter(
        QuizResult.id == result_id, QuizResult.user_id == current_user.id
    ).first()
    if not result:
        raise HTTPException(status_code=404, detail="Quiz result not found")
    return result


# ============= Single Quiz Endpoints =============

@router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Get a quiz the caller may see."""
    return _get_accessible_quiz(db, quiz_id, current_user)


@router.patch("/{quiz_id}", response_model=QuizResponse)
def update_quiz(
    quiz_id: int,
    quiz_in: QuizUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Update the caller's quiz. Supplying ``questions`` replaces them all."""
    quiz = _get_quiz_or_404(db, quiz_id)
    if quiz.created_by != current_user.id:
        raise HTTPException(status_code=403, detail="You can only update quizzes you created")

    for field, value in quiz_in.model_dump(exclude_unset=True, exclude={"questions"}).items():
        setattr(quiz, field, value)
    if quiz_in.questions is not None:
        quiz.questions = _build_questions(quiz_in.questions)  # type: ignore

    db.commit()
    db.refresh(quiz)
    return quiz


@router.delete("/{quiz_id}")
def delete_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete one of the caller's quizzes."""
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.created_by == current_user.id).first()
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found or you don't have permission to delete it")

    db.delete(quiz)
    db.commit()
    return {"message": "Quiz deleted successfully"}


@router.get("/{quiz_id}/questions", response_model=List[QuestionResponse])
def get_quiz_questions(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Questions of a quiz the caller may see."""
    return _get_accessible_quiz(db, quiz_id, current_user).questions


# ============= Attempt Endpoints =============

@router.post("/{quiz_id}/attempts", response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
def start_attempt(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Start a new attempt at a quiz."""
    quiz = _get_accessible_quiz(db, quiz_id, current_user)
    attempt = QuizAttempt(
        quiz_id=quiz.id,
        user_id=current_user.id,
        answers=[],
        score=0,
        total_questions=quiz.question_count,
        time_spent=0,
        is_complete=False,
        started_at=datetime.now(),
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt


@router.patch("/{quiz_id}/attempts", response_model=AttemptResponse)
def update_attempt(
    quiz_id: int,
    body: AttemptUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Submit answers for an attempt and optionally complete it.

    Answers are graded here and merged into earlier submissions by
    question id. Completing the attempt scores it as a percentage, stores a
    quiz result and awards quiz XP.
    """
    if body.attempt_id is None:
        raise HTTPException(status_code=400, detail="Attempt ID is required")

    attempt = db.query(QuizAttempt).filter(
        QuizAttempt.id == body.attempt_id, QuizAttempt.quiz_id == quiz_id
    ).first()
    if not attempt:
        raise HTTPException(status_code=404, detail="Attempt not found")
    if attempt.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only update your own attempts")
    if attempt.is_complete:
        raise HTTPException(status_code=400, detail="Attempt is already complete")

    quiz = _get_quiz_or_404(db, quiz_id)
    questions = {q.id: q for q in quiz.questions}

    merged = {a["question_id"]: a for a in (attempt.answers or [])}  # type: ignore
    for answer in body.answers:
        question = questions.get(answer.question_id)
        if question is None:
            raise HTTPException(status_code=400, detail=f"Question {answer.question_id} is not part of this quiz")
        merged[answer.question_id] = {
            "question_id": answer.question_id,
            "user_answer": answer.user_answer,
            "is_correct": grade_answer(
                question.type, question.correct_answer, answer.user_answer, question.options  # type: ignore
            ),
            "time_spent": answer.time_spent,
        }
    attempt.answers = list(merged.values())  # type: ignore

    if body.is_complete:
        now = datetime.now()
        correct = sum(1 for a in attempt.answers if a["is_correct"])  # type: ignore
        total = attempt.total_questions or 0
        attempt.is_complete = True  # type: ignore
        attempt.completed_at = now  # type: ignore
        attempt.score = correct / total * 100 if total else 0  # type: ignore
        attempt.time_spent = (  # type: ignore
            body.time_spent if body.time_spent is not None
            else int(sum(a.get("time_spent") or 0 for a in attempt.answers))  # type: ignore
        )
        _record_result(
            db, quiz, current_user, correct, total, attempt.time_spent,  # type: ignore
            attempt.answers, now,  # type: ignore
        )
        gamification.record_quiz_activity(current_user, correct, total)  # type: ignore
        logger.info(f"User {current_user.id} completed attempt {attempt.id} on quiz {quiz_id}: {correct}/{total}")

    db.commit()
    db.refresh(attempt)
    return attempt


@router.get("/{quiz_id}/attempts")
def list_attempts(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's attempts at a quiz, newest first, with the quiz analytics."""
    quiz = _get_accessible_quiz(db, quiz_id, current_user)
    attempts = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.quiz_id == quiz_id, QuizAttempt.user_id == current_user.id)
        .order_by(QuizAttempt.started_at.desc(), QuizAttempt.id.desc())
        .all()
    )
    return {
        "attempts": [AttemptResponse.model_validate(a) for a in attempts],
        "analytics": _analytics_for(db, quiz, current_user),
    }


def _analytics_for(db: Session, quiz: Quiz, user: User) -> dict:
    results = db.query(QuizResult).filter(QuizResult.quiz_id == quiz.id).all()
    attempts = db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz.id).all()
    return compute_analytics(
        [q.id for q in quiz.questions], results, user.id, attempts  # type: ignore
    )


@router.get("/{quiz_id}/analytics")
def get_analytics(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Aggregate analytics for a quiz and the caller's standing in it."""
    quiz = _get_accessible_quiz(db, quiz_id, current_user)
    return {"analytics": _analytics_for(db, quiz, current_user)}
