"""
API endpoints for clinical cases, their ratings, comments and bookmarks.
"""
from math import ceil
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import String, cast, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medlearn.core.dependencies import get_current_active_user, get_optional_user
from medlearn.db.base import get_db
from medlearn.models.case import Bookmark, Case, Comment
from medlearn.models.user import User
from medlearn.schemas.case import (
    BookmarkRequest,
    CaseCreate,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    RatingRequest,
)
from medlearn.services.ratings import CaseNotFoundError, get_user_rating, rate_case

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_case_or_404(db: Session, case_id: int) -> Case:
    case = db.query(Case).filter(Case.id == case_id).first()
    if not case:
        raise HTTPException(status_code=404, detail="Case not found")
    return case


def _pagination(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "pages": ceil(total / limit) if limit else 0}


# ============= Case Endpoints =============

@router.get("", response_model=CaseListResponse)
def list_cases(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> Any:
    """
    List cases, newest first. This endpoint is public.

    Args:
        category: Exact category filter
        difficulty: beginner, intermediate or advanced
        search: Case-insensitive match on title, description or tags
        page: 1-based page number
        limit: Page size
    """
    query = db.query(Case)
    if category:
        query = query.filter(Case.category == category)
    if difficulty:
        query = query.filter(Case.difficulty == difficulty)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Case.title.ilike(pattern),
                Case.description.ilike(pattern),
                cast(Case.tags, String).ilike(pattern),
            )
        )

    total = query.count()
    cases = (
        query.order_by(Case.created_at.desc(), Case.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"cases": cases, "pagination": _pagination(total, page, limit)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_case(
    case_in: CaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Create a case owned by the caller."""
    case = Case(
        **case_in.model_dump(exclude={"answers"}),
        answers=[a.model_dump() for a in case_in.answers],
        created_by=current_user.id,
        rating_count=0,
        rating_sum=0,
        rating_avg=0,
    )
    db.add(case)
    db.commit()
    db.refresh(case)

    logger.info(f"User {current_user.id} created case {case.id}")
    return {"message": "Case created successfully", "caseId": case.id}


@router.get("/saved", response_model=List[CaseResponse])
def list_saved_cases(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Cases bookmarked by the caller, most recently saved first."""
    return (
        db.query(Case)
        .join(Bookmark, Bookmark.case_id == Case.id)
        .filter(Bookmark.user_id == current_user.id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .all()
    )


# ============= Bookmark Endpoints =============

@router.post("/bookmark")
def toggle_bookmark(
    body: BookmarkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Bookmark a case, or remove the bookmark if it already exists."""
    if body.case_id is None:
        raise HTTPException(status_code=400, detail="Case ID is required")
    _get_case_or_404(db, body.case_id)

    bookmark = db.query(Bookmark).filter(
        Bookmark.user_id == current_user.id,
        Bookmark.case_id == body.case_id,
    ).first()

    if bookmark:
        db.delete(bookmark)
        db.commit()
        return {"message": "Bookmark removed", "isBookmarked": False}

    db.add(Bookmark(user_id=current_user.id, case_id=body.case_id))
    db.commit()
    return {"message": "Case bookmarked", "isBookmarked": True}


@router.get("/bookmark")
def get_bookmark_status(
    case_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Whether the caller has bookmarked ``case_id``."""
    if case_id is None:
        raise HTTPException(status_code=400, detail="Case ID is required")
    exists = db.query(Bookmark).filter(
        Bookmark.user_id == current_user.id,
        Bookmark.case_id == case_id,
    ).first() is not None
    return {"isBookmarked": exists}


@router.get("/{case_id}", response_model=CaseResponse)
def get_case(case_id: int, db: Session = Depends(get_db)) -> Any:
    """Get a single case."""
    return _get_case_or_404(db, case_id)


@router.put("/{case_id}", response_model=CaseResponse)
def update_case(
    case_id: int,
    case_in: CaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Update a case. Only its creator may edit it."""
    case = _get_case_or_404(db, case_id)
    if case.created_by != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit cases you created")

    update_data = case_in.model_dump(exclude_unset=True, exclude={"answers"})
    for field, value in update_data.items():
        setattr(case, field, value)
    if case_in.answers is not None:
        case.answers = [a.model_dump() for a in case_in.answers]  # type: ignore

    db.commit()
    db.refresh(case)
    return case


@router.delete("/{case_id}")
def delete_case(
    case_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete a case with its ratings, comments and bookmarks."""
    case = _get_case_or_404(db, case_id)
    if case.created_by != current_user.id:
        raise HTTPException(status_code=403, detail="You can only delete cases you created")

    # Replies first so the self-referencing parent_id never dangles
    db.query(Comment).filter(
        Comment.case_id == case_id, Comment.parent_id.isnot(None)
    ).delete(synchronize_session=False)
    db.delete(case)
    db.commit()
    logger.info(f"User {current_user.id} deleted case {case_id}")
    return {"message": "Case deleted successfully"}


# ============= Rating Endpoints =============

@router.post("/{case_id}/rate")
def rate(
    case_id: int,
    body: RatingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Rate a case from 1 to 5. A second rating by the same user replaces the
    first one.
    """
    if not 1 <= body.rating <= 5:
        raise HTTPException(status_code=400, detail="Rating must be a number between 1 and 5")

    try:
        try:
            updated, case = rate_case(db, case_id, int(current_user.id), body.rating)  # type: ignore
        except IntegrityError:
            # Lost a race with a concurrent first rating; the retry updates it
            updated, case = rate_case(db, case_id, int(current_user.id), body.rating)  # type: ignore
    except CaseNotFoundError:
        raise HTTPException(status_code=404, detail="Case not found")

    return {
        "message": "Rating updated successfully" if updated else "Rating added successfully",
        "rating": body.rating,
        "caseRating": {"count": case.rating_count, "average": case.rating_avg},
    }


@router.get("/{case_id}/rate")
def get_rating(
    case_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Aggregate rating of a case, plus the caller's own rating when signed in."""
    case = _get_case_or_404(db, case_id)
    user_id = int(current_user.id) if current_user else None  # type: ignore
    return {
        "caseRating": {"count": case.rating_count, "average": case.rating_avg},
        "userRating": get_user_rating(db, case_id, user_id),
    }


# ============= Comment Endpoints =============

def _get_comment_or_404(db: Session, case_id: int, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id, Comment.case_id == case_id).first()
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


def _reply_levels(db: Session, comment_id: int) -> List[List[int]]:
    """Ids of every reply below a comment, one list per nesting level."""
    levels = []
    frontier = [comment_id]
    while frontier:
        frontier = [row.id for row in db.query(Comment.id).filter(Comment.parent_id.in_(frontier)).all()]
        if frontier:
            levels.append(frontier)
    return levels


@router.get("/{case_id}/comments")
def list_comments(
    case_id: int,
    parent_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> Any:
    """
    Comments on a case. Without ``parent_id`` (or with ``parent_id=null``)
    top-level comments are returned newest first; otherwise the replies to
    that comment, oldest first.
    """
    _get_case_or_404(db, case_id)

    query = db.query(Comment).filter(Comment.case_id == case_id)
    if parent_id is None or parent_id == "null":
        query = query.filter(Comment.parent_id.is_(None)).order_by(Comment.created_at.desc(), Comment.id.desc())
    else:
        if not parent_id.isdigit():
            raise HTTPException(status_code=400, detail="Invalid parent_id")
        query = query.filter(Comment.parent_id == int(parent_id)).order_by(Comment.created_at, Comment.id)

    total = query.count()
    comments = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "comments": [CommentResponse.model_validate(c) for c in comments],
        "pagination": _pagination(total, page, limit),
    }


@router.post("/{case_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    case_id: int,
    body: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Post a comment or, with ``parent_id``, a reply."""
    content = body.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    _get_case_or_404(db, case_id)

    parent = None
    if body.parent_id is not None:
        parent = _get_comment_or_404(db, case_id, body.parent_id)

    comment = Comment(
        case_id=case_id,
        user_id=current_user.id,
        user_name=current_user.name or str(current_user.email).split("@")[0],
        user_image=current_user.image,
        content=content,
        parent_id=body.parent_id,
        likes=[],
        reply_count=0,
        is_edited=False,
    )
    db.add(comment)
    if parent is not None:
        parent.reply_count = (parent.reply_count or 0) + 1  # type: ignore
    db.commit()
    db.refresh(comment)
    return comment


@router.put("/{case_id}/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    case_id: int,
    comment_id: int,
    body: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Edit the text of one of the caller's comments."""
    content = body.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    comment = _get_comment_or_404(db, case_id, comment_id)
    if comment.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own comments")

    comment.content = content  # type: ignore
    comment.is_edited = True  # type: ignore
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/{case_id}/comments/{comment_id}")
def delete_comment(
    case_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete one of the caller's comments together with every reply below it."""
    comment = _get_comment_or_404(db, case_id, comment_id)
    if comment.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only delete your own comments")

    # Deepest replies first so no parent_id points at a deleted row
    for ids in reversed(_reply_levels(db, comment.id)):
        db.query(Comment).filter(Comment.id.in_(ids)).delete(synchronize_session=False)
    if comment.parent_id is not None:
        parent = db.query(Comment).filter(Comment.id == comment.parent_id).first()
        if parent is not None and parent.reply_count > 0:
            parent.reply_count = parent.reply_count - 1  # type: ignore
    db.delete(comment)
    db.commit()
    return {"message": "Comment deleted successfully"}


@router.post("/{case_id}/comments/{comment_id}/like")
def toggle_comment_like(
    case_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Like a comment, or remove the caller's like."""
    comment = _get_comment_or_404(db, case_id, comment_id)
    likes = list(comment.likes or [])  # type: ignore
    if current_user.id in likes:
        likes.remove(current_user.id)
        is_liked = False
    else:
        likes.append(current_user.id)
        is_liked = True
    comment.likes = likes  # type: ignore
    db.commit()
    return {"likes": len(likes), "isLiked": is_liked}
