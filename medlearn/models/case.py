"""
Clinical case models: cases, ratings, comments and bookmarks.
"""
from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medlearn.db.base import Base


class Case(Base):
    """Clinical case model."""

    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    tags = Column(JSON, default=list)
    media_urls = Column(JSON, default=list)
    specialties = Column(JSON, default=list)
    difficulty = Column(String, default="intermediate", index=True)  # beginner, intermediate, advanced
    answers = Column(JSON, default=list)  # [{question, answer, explanation, image_url}]
    is_ai_generated = Column(Boolean, default=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Rating aggregate
    rating_count = Column(Integer, default=0, nullable=False)
    rating_sum = Column(Integer, default=0, nullable=False)
    rating_avg = Column(Float, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    author = relationship("User", back_populates="cases")
    ratings = relationship("Rating", back_populates="case", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="case", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="case", cascade="all, delete-orphan")


class Rating(Base):
    """A user's 1-5 rating of a case."""

    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("user_id", "case_id", name="uq_rating_user_case"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="ratings")
    case = relationship("Case", back_populates="ratings")


class Comment(Base):
    """Threaded comment on a case."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_name = Column(String, nullable=False)
    user_image = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("comments.id"), nullable=True, index=True)
    likes = Column(JSON, default=list)  # user ids
    reply_count = Column(Integer, default=0, nullable=False)
    is_edited = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    case = relationship("Case", back_populates="comments")


class Bookmark(Base):
    """Saved case for a user."""

    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "case_id", name="uq_bookmark_user_case"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="bookmarks")
    case = relationship("Case", back_populates="bookmarks")
