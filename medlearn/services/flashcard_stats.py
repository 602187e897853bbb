"""
Per-user flashcard study statistics.
"""
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from medlearn.models.flashcard import Flashcard, FlashcardSession

HISTORY_DAYS = 30


def _current_streak(study_days: set, today: date) -> int:
    streak = 0
    day = today
    while day in study_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def build_statistics(db: Session, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Compute the statistics payload for a user's flashcard history.

    Args:
        db: Database session
        user_id: Owner of the cards and sessions
        now: Reference time, defaults to the current time

    Returns:
        Statistics dict with totals, accuracy, streak and a 30 day history
    """
    now = now or datetime.now()
    today = now.date()

    total_cards = db.query(Flashcard).filter(Flashcard.user_id == user_id).count()
    cards_due = (
        db.query(Flashcard)
        .filter(Flashcard.user_id == user_id, Flashcard.next_review_date <= now)
        .count()
    )
    sessions = db.query(FlashcardSession).filter(FlashcardSession.user_id == user_id).all()

    total_correct = sum(s.correct_answers or 0 for s in sessions)
    total_incorrect = sum(s.incorrect_answers or 0 for s in sessions)
    answered = total_correct + total_incorrect

    per_day: Dict[date, int] = {}
    for s in sessions:
        day = s.start_time.date()
        per_day[day] = per_day.get(day, 0) + (s.cards_studied or 0)

    history_start = today - timedelta(days=HISTORY_DAYS - 1)
    last_30_days = []
    for offset in range(HISTORY_DAYS):
        day = history_start + timedelta(days=offset)
        last_30_days.append({"date": day.isoformat(), "count": per_day.get(day, 0)})

    return {
        "totalCards": total_cards,
        "totalSessions": len(sessions),
        "cardsDue": cards_due,
        "currentStreak": _current_streak(set(per_day), today),
        "totalCorrect": total_correct,
        "totalIncorrect": total_incorrect,
        "totalSkipped": sum(s.skipped_cards or 0 for s in sessions),
        "accuracy": round(total_correct / answered * 100) if answered else 0,
        "totalTimeSpent": sum(s.total_time_spent or 0 for s in sessions),
        "totalCardsStudied": sum(s.cards_studied or 0 for s in sessions),
        "last30Days": last_30_days,
    }
