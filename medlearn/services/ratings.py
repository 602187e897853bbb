"""
Case rating aggregate maintenance.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from medlearn.models.case import Case, Rating

logger = logging.getLogger(__name__)


class CaseNotFoundError(LookupError):
    """Raised when the rated case does not exist."""


def rate_case(db: Session, case_id: int, user_id: int, value: int) -> Tuple[bool, Case]:
    """
    Add or update a user's rating and keep the case aggregate in step.

    The case row is locked for the duration of the transaction. Any failure
    rolls the whole write back and is re-raised.

    Args:
        db: Database session
        case_id: Case being rated
        user_id: Rating user
        value: Rating between 1 and 5

    Returns:
        Tuple of (was_update, refreshed case)

    Raises:
        CaseNotFoundError: If the case does not exist
    """
    try:
        case = (
            db.query(Case)
            .filter(Case.id == case_id)
            .with_for_update()
            .first()
        )
        if case is None:
            raise CaseNotFoundError(f"Case {case_id} not found")

        existing = (
            db.query(Rating)
            .filter(Rating.case_id == case_id, Rating.user_id == user_id)
            .first()
        )

        if existing is not None:
            case.rating_sum = case.rating_sum - existing.rating + value  # type: ignore
            existing.rating = value  # type: ignore
            updated = True
        else:
            db.add(Rating(user_id=user_id, case_id=case_id, rating=value))
            case.rating_count = case.rating_count + 1  # type: ignore
            case.rating_sum = case.rating_sum + value  # type: ignore
            updated = False

        case.rating_avg = case.rating_sum / case.rating_count if case.rating_count else 0  # type: ignore
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(case)
    logger.info(
        f"Case {case_id} rated {value} by user {user_id} "
        f"(count={case.rating_count}, avg={case.rating_avg:.2f})"
    )
    return updated, case


def get_user_rating(db: Session, case_id: int, user_id: Optional[int]) -> Optional[int]:
    if user_id is None:
        return None
    rating = (
        db.query(Rating)
        .filter(Rating.case_id == case_id, Rating.user_id == user_id)
        .first()
    )
    return rating.rating if rating else None  # type: ignore
